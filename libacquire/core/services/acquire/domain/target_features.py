"""
L1 Domain — Capability string → compiler target-feature expression (pure).

A required feature counts as present only when its token occurs in
the capability string exactly once.  Zero occurrences and repeated
occurrences (``sse`` inside ``sse2 sse4_1 ...``) are both absent.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from libacquire.core.services.acquire.data.feature_flags import FEATURE_FLAG_MAP


def _occurrences(capability: str, token: str) -> int:
    if not token:
        return 0
    return capability.count(token)


def present_features(capability: str, required: Sequence[str]) -> tuple[str, ...]:
    """Required tokens found exactly once in ``capability``, in ``required`` order."""
    return tuple(t for t in required if _occurrences(capability, t) == 1)


def compute_target_features(
    capability: str,
    required: Sequence[str],
    flag_map: Mapping[str, str],
) -> str:
    """Build the comma-joined target-feature expression.

    Args:
        capability: Lowercase capability string from the feature detector.
        required: Tokens that qualify an optimized build, in output order.
        flag_map: Token → compiler flag.  Present tokens without an
            entry are skipped.

    Returns:
        e.g. ``"+sha,+sse2"``, or ``""`` for a standard build.
    """
    flags = [
        flag_map[token]
        for token in present_features(capability, required)
        if token in flag_map
    ]
    return ",".join(flags)


def merged_flag_map(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Built-in flag map with per-project entries layered on top."""
    merged = dict(FEATURE_FLAG_MAP)
    if overrides:
        merged.update(overrides)
    return merged
