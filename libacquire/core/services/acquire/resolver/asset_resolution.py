"""
L2 Resolver — Release asset resolution.

Maps (repository, commit, platform, variant) to a final download URL:
the release is tagged with the commit prefix and the asset name
contains ``{repo}-{platform}-{variant}``.
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from libacquire.core.models.config import ReleaseConfig
from libacquire.core.services.acquire.data.constants import _IARCH_MAP
from libacquire.core.services.acquire.detection.repository import release_tag
from libacquire.core.services.acquire.domain.errors import ReleaseNotFoundError
from libacquire.core.services.acquire.domain.variants import ReleaseVariant

logger = logging.getLogger(__name__)


class ReleaseAPI(Protocol):
    def get_release(self, repository: str, tag: str) -> dict[str, Any]: ...

    def resolve_download_url(self, asset_url: str) -> str: ...


@dataclass(frozen=True)
class ReleaseAsset:
    """A resolved, downloadable release asset."""

    repository: str
    tag: str
    name: str
    pattern: str
    api_url: str
    download_url: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def platform_name(
    system: str | None = None,
    machine: str | None = None,
    *,
    style: str = "go",
) -> str:
    """``{os}-{arch}`` as used in asset names.

    ``go`` style gives ``linux-amd64`` / ``darwin-arm64``; ``uname``
    style keeps the raw ``uname -s``/``uname -m`` spelling
    (``Linux-x86_64``, ``Darwin-arm64``).
    """
    system = system or platform.system()
    machine = machine or platform.machine()
    if style == "uname":
        return f"{system}-{machine}"
    arch = _IARCH_MAP.get(machine, _IARCH_MAP.get(machine.lower(), machine.lower()))
    return f"{system.lower()}-{arch}"


def configured_platform(release: ReleaseConfig) -> str:
    """Platform segment for this host, honouring an explicit override."""
    return release.asset_platform or platform_name(style=release.platform_style)


def asset_pattern(repo_name: str, platform_id: str, variant: ReleaseVariant) -> str:
    return f"{repo_name}-{platform_id}-{variant.value}"


def select_asset(assets: Sequence[dict[str, Any]], pattern: str) -> dict[str, Any] | None:
    """First asset whose name contains ``pattern``."""
    for asset in assets:
        if pattern in str(asset.get("name", "")):
            return asset
    return None


def resolve_asset(
    client: ReleaseAPI,
    repository: str,
    variant: ReleaseVariant,
    *,
    commit: str,
    platform_id: str | None = None,
) -> ReleaseAsset:
    """Resolve the release asset for ``commit`` and ``variant``.

    Args:
        client: Release API client.
        repository: ``owner/name``.
        variant: Backend variant selecting the asset suffix.
        commit: Full commit SHA of the repository state.
        platform_id: Override for :func:`platform_name`.

    Raises:
        ReleaseNotFoundError: Lookup failed, no asset matches, or the
            asset URL could not be resolved.
    """
    tag = release_tag(commit)
    release = client.get_release(repository, tag)

    repo_name = repository.rsplit("/", 1)[-1]
    pattern = asset_pattern(repo_name, platform_id or platform_name(), variant)

    assets = release.get("assets") or []
    if not isinstance(assets, list) or not all(isinstance(a, dict) for a in assets):
        raise ReleaseNotFoundError(
            f"Malformed asset list in {repository} release {tag}: "
            f"expected a list of objects, got {type(assets).__name__}"
        )

    matched = select_asset(assets, pattern)
    if matched is None or not matched.get("url"):
        available = [str(a.get("name", "?")) for a in assets[:10]]
        raise ReleaseNotFoundError(
            f"No asset matching '{pattern}' in {repository} release {tag} "
            f"(available: {', '.join(available) or 'none'})"
        )

    api_url = str(matched["url"])
    download_url = client.resolve_download_url(api_url)
    asset = ReleaseAsset(
        repository=repository,
        tag=tag,
        name=str(matched.get("name", "")),
        pattern=pattern,
        api_url=api_url,
        download_url=download_url,
    )
    logger.info("Resolved %s → %s", asset.name, asset.download_url)
    return asset
