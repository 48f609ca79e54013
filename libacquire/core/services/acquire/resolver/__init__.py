"""
L2 Resolver — commit + variant → downloadable release asset.
"""

from libacquire.core.services.acquire.resolver.asset_resolution import (  # noqa: F401
    ReleaseAsset,
    asset_pattern,
    configured_platform,
    platform_name,
    resolve_asset,
    select_asset,
)
from libacquire.core.services.acquire.resolver.release_client import (  # noqa: F401
    ReleaseClient,
)
