"""
L4 Execution — Artifact installation and verification.

One generic locate-and-copy routine is applied to every manifest
entry, whatever tree the artifacts came from (extracted release or
build output).  Verification is the single unconditional hard stop.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator, Sequence
from pathlib import Path

from libacquire.core.services.acquire.domain.errors import InstallationIncompleteError
from libacquire.core.services.acquire.domain.manifest import ArtifactEntry

logger = logging.getLogger(__name__)


def locate_artifact(name: str, search_root: Path) -> Iterator[Path]:
    """Yield every file called ``name`` under ``search_root``.

    Symlinked directories are followed; each real directory is
    visited once so link cycles terminate.
    """
    seen: set[str] = set()
    for dirpath, dirnames, filenames in os.walk(search_root, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in seen:
            dirnames[:] = []
            continue
        seen.add(real)
        dirnames.sort()
        if name in filenames:
            candidate = Path(dirpath) / name
            if candidate.is_file():
                yield candidate


def install_artifact(entry: ArtifactEntry, search_root: Path) -> list[Path]:
    """Copy every match of ``entry.name`` to its destination; last match wins."""
    copied: list[Path] = []
    dest = entry.destination
    for match in locate_artifact(entry.name, search_root):
        if dest.exists() and match.resolve() == dest.resolve():
            copied.append(match)
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(match, dest)
        copied.append(match)
        logger.debug("Copied %s → %s", match, dest)

    if not copied:
        logger.warning("No %s (%s) found under %s", entry.kind, entry.name, search_root)
    elif len(copied) > 1:
        logger.warning(
            "%d copies of %s under %s; kept %s",
            len(copied), entry.name, search_root, copied[-1],
        )
    return copied


def install_artifacts(
    manifest: Sequence[ArtifactEntry],
    search_root: Path,
) -> dict[str, list[str]]:
    """Install every manifest entry from ``search_root``.

    Returns:
        Artifact name → source paths copied (in copy order).
    """
    logger.info("Installing artifacts from %s", search_root)
    return {
        entry.name: [str(p) for p in install_artifact(entry, search_root)]
        for entry in manifest
    }


def verify_artifacts(manifest: Sequence[ArtifactEntry]) -> None:
    """Check every artifact exists at its destination.

    Raises:
        InstallationIncompleteError: Naming the first missing file.
    """
    for entry in manifest:
        if not entry.destination.is_file():
            raise InstallationIncompleteError(entry.name, str(entry.destination.parent))
    logger.info("Verified %d artifacts", len(manifest))
