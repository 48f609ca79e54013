"""
L1 Domain — Artifact manifest (pure).

One entry per required artifact: the file name searched for under a
source tree and the path it must end up at in the install root.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from libacquire.core.models.config import AcquireConfig


@dataclass(frozen=True)
class ArtifactEntry:
    """A required artifact and its install destination."""

    kind: str
    name: str
    destination: Path


def build_manifest(config: AcquireConfig) -> list[ArtifactEntry]:
    """Header, static archive, and pkg-config file, installed at the root."""
    root = config.root_path
    names = config.artifacts
    return [
        ArtifactEntry("header", names.header, root / names.header),
        ArtifactEntry("archive", names.archive, root / names.archive),
        ArtifactEntry("pkgconfig", names.pkgconfig, root / names.pkgconfig),
    ]
