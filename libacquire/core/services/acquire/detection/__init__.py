"""
L3 Detection — read-only host probes.

These functions READ system state but never WRITE.
Subprocess calls, file reads, PATH lookups — all read-only.
"""

from libacquire.core.services.acquire.detection.cpu_features import (  # noqa: F401
    CapabilityProbe,
    classify_arch,
    detect_capabilities,
)
from libacquire.core.services.acquire.detection.repository import (  # noqa: F401
    current_commit,
    release_tag,
)
from libacquire.core.services.acquire.detection.toolchain import (  # noqa: F401
    check_toolchain,
    read_toolchain_version,
)
