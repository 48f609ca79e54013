"""
L3 Detection — Source-build toolchain preconditions.

The source build is the fallback of last resort, so a missing
toolchain is reported as a fatal error before anything is run.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Callable
from pathlib import Path

from libacquire.core.models.config import BuildConfig
from libacquire.core.services.acquire.domain.errors import ToolchainMissingError

logger = logging.getLogger(__name__)

_CHANNEL_RE = re.compile(r"""^\s*channel\s*=\s*["']([^"']+)["']""", re.MULTILINE)


def check_toolchain(
    build: BuildConfig,
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> dict[str, str]:
    """Verify the toolchain and its version manager are on PATH.

    Returns:
        Tool name → resolved path.

    Raises:
        ToolchainMissingError: Naming every missing binary.
    """
    found: dict[str, str] = {}
    missing: list[str] = []
    for tool in (build.toolchain, build.version_manager):
        path = which(tool)
        if path:
            found[tool] = path
        else:
            missing.append(tool)

    if missing:
        raise ToolchainMissingError(missing, "not found on PATH")

    logger.debug("Toolchain available: %s", found)
    return found


def read_toolchain_version(path: Path) -> str:
    """Pinned toolchain version from a version file.

    Accepts a plain file whose first non-empty line is the version
    (``rust-toolchain``) or a TOML file with ``channel = "..."``.

    Raises:
        ToolchainMissingError: File absent or empty.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ToolchainMissingError(
            [path.name], f"cannot read toolchain version file {path}: {e}"
        ) from e

    m = _CHANNEL_RE.search(content)
    if m:
        return m.group(1).strip()

    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and not line.startswith("["):
            return line

    raise ToolchainMissingError([path.name], f"no toolchain version in {path}")
