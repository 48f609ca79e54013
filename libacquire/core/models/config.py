"""
Acquisition config model — the descriptor read from libacquire.yml.

Describes which library is acquired, where its releases live and how
their assets are named, which CPU features qualify an optimized build,
and how the external build script is driven.  Loaded once per run by
the config loader.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class ArtifactNames(BaseModel):
    """File names of the three installed artifacts.

    Empty names are derived from the library name.
    """

    header: str = ""
    archive: str = ""
    pkgconfig: str = ""

    def names(self) -> tuple[str, str, str]:
        return (self.header, self.archive, self.pkgconfig)


class BuildConfig(BaseModel):
    """How the external source build is invoked."""

    script: str = "scripts/build.sh"
    sources: str = "."
    output_dir: str = "target/release"
    version_file: str = "rust-toolchain"

    # Binaries that must be on PATH before a build is attempted
    toolchain: str = "cargo"
    version_manager: str = "rustup"

    # Target-feature injection, scoped to the build subprocess
    flags_env: str = "RUSTFLAGS"
    flags_template: str = "-C target-feature={features}"

    # Feature strings per backend variant
    hardware_features: str = "pairing"
    software_features: str = "blst"
    portable_features: str = "blst,portable"
    gpu_feature: str = "gpu"

    timeout: int = Field(default=3600, gt=0)

    @field_validator("flags_template")
    @classmethod
    def _template_has_placeholder(cls, v: str) -> str:
        if "{features}" not in v:
            raise ValueError("flags_template must contain '{features}'")
        return v


class NetworkConfig(BaseModel):
    """Release API endpoint, retry budget, and time limits."""

    api_url: str = "https://api.github.com"
    attempts: int = Field(default=3, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=10.0, ge=0)
    deadline: float | None = 600.0

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class ReleaseConfig(BaseModel):
    """How prebuilt release assets are named for this host."""

    # go: linux-amd64 / darwin-arm64; uname: Linux-x86_64 / Darwin-arm64
    platform_style: Literal["go", "uname"] = "go"
    # Explicit platform segment, bypassing host detection
    asset_platform: str | None = None


class AcquireConfig(BaseModel):
    """Root acquisition descriptor — loaded from libacquire.yml."""

    version: int = 1

    library: str
    repository: str
    install_root: str = "."

    required_features: list[str] = Field(default_factory=list)
    feature_flags: dict[str, str] = Field(default_factory=dict)

    artifacts: ArtifactNames = Field(default_factory=ArtifactNames)
    build: BuildConfig = Field(default_factory=BuildConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)

    @field_validator("repository")
    @classmethod
    def _owner_slash_name(cls, v: str) -> str:
        if not _REPOSITORY_RE.match(v):
            raise ValueError(f"repository must look like 'owner/name', got {v!r}")
        return v

    @field_validator("required_features")
    @classmethod
    def _lowercase_features(cls, v: list[str]) -> list[str]:
        return [token.strip().lower() for token in v if token.strip()]

    @field_validator("feature_flags")
    @classmethod
    def _lowercase_flag_keys(cls, v: dict[str, str]) -> dict[str, str]:
        return {k.strip().lower(): flag for k, flag in v.items()}

    @model_validator(mode="after")
    def _default_artifact_names(self) -> AcquireConfig:
        lib = self.library
        if not self.artifacts.header:
            self.artifacts.header = f"{lib}.h"
        if not self.artifacts.archive:
            self.artifacts.archive = f"lib{lib}.a"
        if not self.artifacts.pkgconfig:
            self.artifacts.pkgconfig = f"{lib}.pc"
        return self

    @property
    def root_path(self) -> Path:
        return Path(self.install_root)

    @property
    def sources_path(self) -> Path:
        return self.root_path / self.build.sources

    @property
    def output_path(self) -> Path:
        return self.sources_path / self.build.output_dir

    @property
    def version_file_path(self) -> Path:
        return self.sources_path / self.build.version_file
