"""
Acquisition service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate onion layer (data → domain → resolver → detection →
execution → orchestration)::

    from libacquire.core.services.acquire import acquire_library
"""

# ── L1: Domain ──
from libacquire.core.services.acquire.domain.errors import (  # noqa: F401
    AcquireError,
    DownloadFailedError,
    ExternalBuildFailedError,
    InstallationIncompleteError,
    ReleaseNotFoundError,
    ToolchainMissingError,
    UnsupportedArchitectureError,
)
from libacquire.core.services.acquire.domain.target_features import (  # noqa: F401
    compute_target_features,
    present_features,
)
from libacquire.core.services.acquire.domain.variants import (  # noqa: F401
    BuildVariant,
    ReleaseVariant,
    select_build_variant,
    select_release_variant,
)

# ── L2: Resolver ──
from libacquire.core.services.acquire.resolver.asset_resolution import (  # noqa: F401
    ReleaseAsset,
    configured_platform,
    resolve_asset,
)
from libacquire.core.services.acquire.resolver.release_client import (  # noqa: F401
    ReleaseClient,
)

# ── L3: Detection ──
from libacquire.core.services.acquire.detection.cpu_features import (  # noqa: F401
    CapabilityProbe,
    detect_capabilities,
)
from libacquire.core.services.acquire.detection.repository import (  # noqa: F401
    current_commit,
)

# ── L4: Execution ──
from libacquire.core.services.acquire.execution.installer import (  # noqa: F401
    install_artifacts,
    verify_artifacts,
)
from libacquire.core.services.acquire.execution.source_build import (  # noqa: F401
    build_from_source,
)

# ── L5: Orchestration ──
from libacquire.core.services.acquire.orchestration.orchestrator import (  # noqa: F401
    AcquireOutcome,
    AcquireState,
    acquire_library,
    compute_flags,
    make_release_client,
)
