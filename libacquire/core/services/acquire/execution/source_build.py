"""
L4 Execution — Build-from-source.

Validates the toolchain, selects the backend feature string, and runs
the external build script with the CPU target features injected into
the build's environment only.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from libacquire.core.models.config import AcquireConfig
from libacquire.core.models.options import AcquireOptions
from libacquire.core.services.acquire.detection.toolchain import (
    check_toolchain,
    read_toolchain_version,
)
from libacquire.core.services.acquire.domain.errors import ExternalBuildFailedError
from libacquire.core.services.acquire.domain.variants import build_feature_string
from libacquire.core.services.acquire.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)

Runner = Callable[..., dict[str, Any]]


def target_feature_env(config: AcquireConfig, target_features: str) -> dict[str, str]:
    """Compiler env override for ``target_features``; empty for a standard build."""
    if not target_features:
        return {}
    build = config.build
    return {build.flags_env: build.flags_template.replace("{features}", target_features)}


def build_command(config: AcquireConfig, toolchain_version: str, features: str) -> list[str]:
    """``[script, library, toolchain_version, features]``.

    The script path is taken relative to the sources directory when a
    file exists there; otherwise it is run as given (found on PATH).
    """
    script = config.sources_path / config.build.script
    executable = str(script) if script.is_file() else config.build.script
    return [executable, config.library, toolchain_version, features]


def build_from_source(
    config: AcquireConfig,
    options: AcquireOptions,
    target_features: str,
    *,
    runner: Runner = _run_subprocess,
    which: Callable[[str], str | None] = shutil.which,
) -> Path:
    """Run the external build and return its output directory.

    Raises:
        ToolchainMissingError: Toolchain, version manager, or pinned
            version unavailable.  Nothing is run.
        ExternalBuildFailedError: The build command failed.
    """
    check_toolchain(config.build, which=which)
    toolchain_version = read_toolchain_version(config.version_file_path)
    features = build_feature_string(options, config.build)

    cmd = build_command(config, toolchain_version, features)
    env_overrides = target_feature_env(config, target_features)

    logger.info(
        "Building %s from source (toolchain %s, features %s, target features %s)",
        config.library, toolchain_version, features or "-", target_features or "-",
    )
    result = runner(
        cmd,
        timeout=config.build.timeout,
        env_overrides=env_overrides or None,
        cwd=str(config.sources_path),
    )

    if not result.get("ok"):
        stderr = result.get("stderr", "")
        if stderr:
            logger.error("Build stderr (tail):\n%s", stderr)
        raise ExternalBuildFailedError(
            f"Source build of {config.library} failed: {result.get('error', 'unknown error')}",
            returncode=result.get("returncode"),
            stderr=stderr,
        )

    logger.info("Build finished in %.1fs", result.get("elapsed_ms", 0) / 1000)
    return config.output_path
