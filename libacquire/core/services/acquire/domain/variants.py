"""
L1 Domain — Backend variant selection (pure).

The same two switches pick both the prebuilt release variant and the
feature string handed to the source build, so the two acquisition
paths always agree on the backend.
"""

from __future__ import annotations

from enum import Enum

from libacquire.core.models.config import BuildConfig
from libacquire.core.models.options import AcquireOptions


class ReleaseVariant(str, Enum):
    """Asset-name suffix of a prebuilt release."""

    STANDARD_PAIRING = "standard-pairing"
    STANDARD_BLST = "standard-blst"


class BuildVariant(str, Enum):
    """Backend compiled by a source build."""

    HARDWARE_PAIRING = "hardware-accelerated-pairing"
    SOFTWARE_FALLBACK = "software-fallback"
    PORTABLE_SOFTWARE_FALLBACK = "portable-software-fallback"


def select_release_variant(options: AcquireOptions) -> ReleaseVariant:
    if options.alternate_backend:
        return ReleaseVariant.STANDARD_BLST
    return ReleaseVariant.STANDARD_PAIRING


def select_build_variant(options: AcquireOptions) -> BuildVariant:
    """Portable only applies together with the alternate backend."""
    if not options.alternate_backend:
        return BuildVariant.HARDWARE_PAIRING
    if options.portable_backend:
        return BuildVariant.PORTABLE_SOFTWARE_FALLBACK
    return BuildVariant.SOFTWARE_FALLBACK


def build_feature_string(options: AcquireOptions, build: BuildConfig) -> str:
    """Comma-joined feature string passed to the build script.

    Returns e.g. ``"pairing,gpu"`` or ``"blst,portable"``.
    """
    variant = select_build_variant(options)
    base = {
        BuildVariant.HARDWARE_PAIRING: build.hardware_features,
        BuildVariant.SOFTWARE_FALLBACK: build.software_features,
        BuildVariant.PORTABLE_SOFTWARE_FALLBACK: build.portable_features,
    }[variant]

    features = [f.strip() for f in base.split(",") if f.strip()]
    if not options.disable_gpu and build.gpu_feature:
        features.append(build.gpu_feature)
    return ",".join(features)
