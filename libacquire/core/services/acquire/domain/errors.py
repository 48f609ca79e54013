"""
L1 Domain — Acquisition error taxonomy.

Download-path errors are ``recoverable``: the orchestrator logs them
and falls back to a source build.  A non-recoverable error raised on
the download path still aborts the run.  Everything else is terminal and
reaches the CLI, which maps ``exit_code`` to the process exit status.
"""

from __future__ import annotations


class AcquireError(Exception):
    """Base class for every acquisition failure."""

    recoverable: bool = False
    exit_code: int = 1


class ReleaseNotFoundError(AcquireError):
    """No release/asset matches the current commit and variant."""

    recoverable = True


class DownloadFailedError(AcquireError):
    """The asset transfer or its extraction did not complete."""

    recoverable = True


class ToolchainMissingError(AcquireError):
    """The build toolchain or its version manager is unavailable."""

    def __init__(self, missing: list[str], detail: str = ""):
        self.missing = list(missing)
        message = f"Build toolchain missing: {', '.join(self.missing)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ExternalBuildFailedError(AcquireError):
    """The external build command exited unsuccessfully."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class InstallationIncompleteError(AcquireError):
    """A required artifact is absent from the install root."""

    def __init__(self, filename: str, destination: str):
        self.filename = filename
        self.destination = destination
        super().__init__(f"Installation incomplete: {filename} missing at {destination}")


class UnsupportedArchitectureError(AcquireError):
    """The host architecture has no known capability source."""

    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(
            f"Unsupported CPU architecture '{machine}': "
            "only x86_64 and aarch64 capability detection is implemented"
        )
