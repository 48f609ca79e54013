"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

from pathlib import Path

# Architecture name normalization for release asset names (Go-style).
_IARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "AMD64": "amd64",      # Windows / WSL2
    "aarch64": "arm64",
    "arm64": "arm64",      # macOS (Darwin reports arm64)
}

# Architectures whose capability line we know how to read.
X86_64_MACHINES: frozenset[str] = frozenset({"x86_64", "amd64"})
AARCH64_MACHINES: frozenset[str] = frozenset({"aarch64", "arm64", "armv8l", "armv8b"})

CPUINFO_PATH = Path("/proc/cpuinfo")

# Capability line markers (case-sensitive, as written by the kernel).
CPUINFO_X86_KEY = "flags"
CPUINFO_AARCH64_KEY = "Features"
SYSCTL_FEATURES_KEY = "features"

# Release API headers.
USER_AGENT = "libacquire/0.1"
ACCEPT_RELEASE_JSON = "application/vnd.github+json"
ACCEPT_ASSET_BINARY = "application/octet-stream"

# Length of the commit-derived release tag.
TAG_LENGTH = 16

# HTTP statuses worth another attempt.
RETRYABLE_HTTP_CODES: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})

DOWNLOAD_CHUNK_SIZE = 64 * 1024
