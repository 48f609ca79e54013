"""
L0 Data — CPU feature token → compiler target-feature flag.

Tokens are written the way the platform reports them (lowercased):
``/proc/cpuinfo`` flags on x86_64, ``Features`` on aarch64, and
``sysctl machdep.cpu.*features`` on macOS.  Flags are rustc
``-C target-feature`` entries.

Entries can be extended or overridden per project via the
``feature_flags`` mapping in libacquire.yml.
"""

from __future__ import annotations

FEATURE_FLAG_MAP: dict[str, str] = {
    # ── x86_64 ──
    "adx": "+adx",
    "bmi2": "+bmi2",
    "sha_ni": "+sha",
    "aes": "+aes",
    "pclmulqdq": "+pclmulqdq",
    "avx": "+avx",
    "avx2": "+avx2",
    "avx512f": "+avx512f",
    "sse2": "+sse2",
    "ssse3": "+ssse3",
    "sse4_1": "+sse4.1",
    "sse4_2": "+sse4.2",
    # ── aarch64 ──
    "asimd": "+neon",
    "sha2": "+sha2",
    "sha3": "+sha3",
    "crc32": "+crc",
    "atomics": "+lse",
}
