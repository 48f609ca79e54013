"""
L5 Orchestration — Acquisition state machine.

    start → compute_flags → try_download → installed
                                 │
                                 └──(error / forced)──→ try_build → installed | fatal

Recoverable download-path errors (an incomplete downloaded set counts
as a failed download) are logged and converted into the fallback.
Build-path and verification errors propagate to the caller, which
owns the exit code.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from libacquire.core.models.config import AcquireConfig
from libacquire.core.models.options import AcquireOptions
from libacquire.core.reliability.retry import Deadline, RetryPolicy
from libacquire.core.services.acquire.detection.cpu_features import (
    CapabilityProbe,
    detect_capabilities,
)
from libacquire.core.services.acquire.detection.repository import current_commit
from libacquire.core.services.acquire.domain.errors import (
    AcquireError,
    DownloadFailedError,
    InstallationIncompleteError,
)
from libacquire.core.services.acquire.domain.manifest import build_manifest
from libacquire.core.services.acquire.domain.target_features import (
    compute_target_features,
    merged_flag_map,
)
from libacquire.core.services.acquire.domain.variants import (
    ReleaseVariant,
    select_release_variant,
)
from libacquire.core.services.acquire.execution.download import (
    download_asset,
    extract_archive,
)
from libacquire.core.services.acquire.execution.installer import (
    install_artifacts,
    verify_artifacts,
)
from libacquire.core.services.acquire.execution.source_build import build_from_source
from libacquire.core.services.acquire.execution.subprocess_runner import _run_subprocess
from libacquire.core.services.acquire.resolver.asset_resolution import (
    ReleaseAPI,
    ReleaseAsset,
    configured_platform,
    resolve_asset,
)
from libacquire.core.services.acquire.resolver.release_client import ReleaseClient

logger = logging.getLogger(__name__)


class AcquireState(str, Enum):
    START = "start"
    COMPUTE_FLAGS = "compute_flags"
    TRY_DOWNLOAD = "try_download"
    TRY_BUILD = "try_build"
    INSTALLED = "installed"
    FATAL = "fatal"


@dataclass
class AcquireOutcome:
    """Result of a successful acquisition run."""

    method: str = ""
    variant: str = ""
    target_features: str = ""
    capabilities: dict[str, Any] = field(default_factory=dict)
    asset: ReleaseAsset | None = None
    fallback_reason: str | None = None
    installed: dict[str, list[str]] = field(default_factory=dict)
    transitions: list[str] = field(default_factory=list)

    def enter(self, state: AcquireState) -> None:
        self.transitions.append(state.value)
        logger.info("→ %s", state.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "variant": self.variant,
            "target_features": self.target_features,
            "capabilities": self.capabilities,
            "asset": self.asset.to_dict() if self.asset else None,
            "fallback_reason": self.fallback_reason,
            "installed": self.installed,
            "transitions": self.transitions,
        }


def compute_flags(config: AcquireConfig, probe: CapabilityProbe) -> str:
    """TargetFeatureExpression for ``probe`` under ``config``."""
    return compute_target_features(
        probe.text,
        config.required_features,
        merged_flag_map(config.feature_flags),
    )


def make_release_client(
    config: AcquireConfig,
    options: AcquireOptions,
    deadline: Deadline | None = None,
) -> ReleaseClient:
    net = config.network
    return ReleaseClient(
        net.api_url,
        token=options.api_token,
        timeout=net.timeout,
        retry=RetryPolicy(
            max_attempts=net.attempts,
            base_delay=net.base_delay,
            max_delay=net.max_delay,
        ),
        deadline=deadline,
    )


def _try_download(
    config: AcquireConfig,
    variant: ReleaseVariant,
    client: ReleaseAPI,
    *,
    commit: str | None,
    platform_id: str | None,
    deadline: Deadline | None,
) -> tuple[ReleaseAsset, dict[str, list[str]]]:
    """Resolve, download, extract, install, verify.  Raises on any failure."""
    commit = commit or current_commit(config.root_path)
    asset = resolve_asset(
        client,
        config.repository,
        variant,
        commit=commit,
        platform_id=platform_id or configured_platform(config.release),
    )

    net = config.network
    workdir = Path(tempfile.mkdtemp(prefix="libacquire-"))
    try:
        archive = download_asset(
            asset.download_url,
            workdir,
            variant=variant.value,
            retry=RetryPolicy(
                max_attempts=net.attempts,
                base_delay=net.base_delay,
                max_delay=net.max_delay,
            ),
            timeout=net.timeout,
            deadline=deadline,
        )
        extracted = extract_archive(archive, workdir / "extracted")
        manifest = build_manifest(config)
        installed = install_artifacts(manifest, extracted)
        try:
            verify_artifacts(manifest)
        except InstallationIncompleteError as e:
            raise DownloadFailedError(f"Release asset {asset.name} is incomplete: {e}") from e
    finally:
        shutil.rmtree(workdir, ignore_errors=True)

    return asset, installed


def acquire_library(
    config: AcquireConfig,
    options: AcquireOptions,
    *,
    probe: CapabilityProbe | None = None,
    release_client: ReleaseAPI | None = None,
    commit: str | None = None,
    platform_id: str | None = None,
    runner: Callable[..., dict[str, Any]] = _run_subprocess,
    which: Callable[[str], str | None] = shutil.which,
) -> AcquireOutcome:
    """Acquire the library's artifacts into the install root.

    Args:
        config: Acquisition descriptor.
        options: Per-run switches (force build, backend, GPU, token).
        probe: Pre-computed capability probe (default: detect now).
        release_client: Release API collaborator (default: urllib client).
        commit: Repository commit (default: ``git rev-parse HEAD``).
        platform_id: Asset platform override (default: host).
        runner: Subprocess runner for the source build.
        which: PATH lookup for toolchain checks.

    Returns:
        AcquireOutcome describing which path installed the artifacts.

    Raises:
        AcquireError: Any non-recoverable failure (toolchain missing,
            build failed, installation incomplete, unsupported arch).
    """
    outcome = AcquireOutcome()
    outcome.enter(AcquireState.START)

    try:
        # ── compute_flags ──
        outcome.enter(AcquireState.COMPUTE_FLAGS)
        if probe is None:
            probe = detect_capabilities()
        outcome.capabilities = probe.to_dict()
        outcome.target_features = compute_flags(config, probe)
        logger.info("Target features: %s", outcome.target_features or "(standard build)")

        variant = select_release_variant(options)
        outcome.variant = variant.value

        # ── try_download ──
        if options.force_build:
            outcome.fallback_reason = "build from source forced"
            logger.info("Skipping release download: build from source forced")
        else:
            outcome.enter(AcquireState.TRY_DOWNLOAD)
            deadline = Deadline(config.network.deadline)
            client = release_client or make_release_client(config, options, deadline)
            try:
                asset, installed = _try_download(
                    config, variant, client,
                    commit=commit, platform_id=platform_id, deadline=deadline,
                )
            except (AcquireError, OSError) as e:
                if isinstance(e, AcquireError) and not e.recoverable:
                    raise
                outcome.fallback_reason = str(e)
                logger.warning("Prebuilt release unavailable, building from source: %s", e)
            else:
                outcome.method = "download"
                outcome.asset = asset
                outcome.installed = installed
                outcome.enter(AcquireState.INSTALLED)
                return outcome

        # ── try_build ──
        outcome.enter(AcquireState.TRY_BUILD)
        output_dir = build_from_source(
            config, options, outcome.target_features, runner=runner, which=which,
        )
        manifest = build_manifest(config)
        outcome.installed = install_artifacts(manifest, output_dir)
        verify_artifacts(manifest)
        outcome.method = "build"
        outcome.enter(AcquireState.INSTALLED)
        return outcome

    except AcquireError:
        outcome.enter(AcquireState.FATAL)
        raise
