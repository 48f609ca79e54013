"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import io
import tarfile
import textwrap
from pathlib import Path
from typing import Any

import pytest

from libacquire.core.config.loader import load_config
from libacquire.core.models.config import AcquireConfig

ARTIFACTS = ("zkcrypto.h", "libzkcrypto.a", "zkcrypto.pc")

COMMIT = "0123456789abcdef0123456789abcdef01234567"


class FakeReleaseClient:
    """Release API double that records every call."""

    def __init__(
        self,
        assets: list[dict[str, Any]] | None = None,
        *,
        error: Exception | None = None,
        final_url: str = "https://downloads.example.com/zkcrypto.tar.gz",
    ):
        self.assets = assets or []
        self.error = error
        self.final_url = final_url
        self.calls: list[tuple[str, ...]] = []

    def get_release(self, repository: str, tag: str) -> dict[str, Any]:
        self.calls.append(("get_release", repository, tag))
        if self.error is not None:
            raise self.error
        return {"tag_name": tag, "assets": self.assets}

    def resolve_download_url(self, asset_url: str) -> str:
        self.calls.append(("resolve_download_url", asset_url))
        return self.final_url


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """An empty repository root that doubles as install root."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "rust-toolchain").write_text("1.79.0\n")
    return root


@pytest.fixture
def config_file(repo_root: Path) -> Path:
    """A valid libacquire.yml in the repository root."""
    content = textwrap.dedent("""\
        library: zkcrypto
        repository: acme/zkcrypto
        required_features: [adx, sha_ni, sse2]
        feature_flags:
          sha_ni: "+sha"
        build:
          script: scripts/build.sh
          version_file: rust-toolchain
          timeout: 60
        network:
          attempts: 3
          timeout: 5
          base_delay: 0
          max_delay: 0
          deadline: 30
    """)
    path = repo_root / "libacquire.yml"
    path.write_text(content)
    return path


@pytest.fixture
def config(config_file: Path) -> AcquireConfig:
    return load_config(config_file)


@pytest.fixture
def artifact_names() -> tuple[str, ...]:
    return ARTIFACTS


@pytest.fixture
def commit() -> str:
    return COMMIT


@pytest.fixture
def fake_client():
    """Factory for FakeReleaseClient instances."""
    return FakeReleaseClient


@pytest.fixture
def make_artifacts():
    """Write the artifact set (or a subset) under a directory."""

    def _make(root: Path, names: tuple[str, ...] = ARTIFACTS, content: str = "artifact") -> list[Path]:
        root.mkdir(parents=True, exist_ok=True)
        paths = []
        for name in names:
            path = root / name
            path.write_text(f"{content}:{name}")
            paths.append(path)
        return paths

    return _make


@pytest.fixture
def make_tarball():
    """Write a gzipped tarball from a ``{member: text}`` mapping."""

    def _make(path: Path, members: dict[str, str]) -> Path:
        with tarfile.open(path, "w:gz") as tar:
            for member, text in members.items():
                data = text.encode()
                info = tarfile.TarInfo(member)
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
        return path

    return _make
