"""
Domain models — Pydantic types for acquisition runs.

All models are re-exported here for convenient access:

    from libacquire.core.models import AcquireConfig, AcquireOptions
"""

from libacquire.core.models.config import (
    AcquireConfig,
    ArtifactNames,
    BuildConfig,
    NetworkConfig,
    ReleaseConfig,
)
from libacquire.core.models.options import AcquireOptions

__all__ = [
    # options.py
    "AcquireOptions",
    # config.py
    "AcquireConfig",
    "ArtifactNames",
    "BuildConfig",
    "NetworkConfig",
    "ReleaseConfig",
]
