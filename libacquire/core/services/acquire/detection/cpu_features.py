"""
L3 Detection — Host CPU capability string.

Reads the line that lists instruction-set extensions:
``/proc/cpuinfo`` on Linux (``flags`` on x86_64, ``Features`` on
aarch64) and ``sysctl -a`` on hosts without procfs (macOS).
"""

from __future__ import annotations

import logging
import platform
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from libacquire.core.services.acquire.data.constants import (
    AARCH64_MACHINES,
    CPUINFO_AARCH64_KEY,
    CPUINFO_PATH,
    CPUINFO_X86_KEY,
    SYSCTL_FEATURES_KEY,
    X86_64_MACHINES,
)
from libacquire.core.services.acquire.domain.errors import UnsupportedArchitectureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapabilityProbe:
    """Lowercase capability string and where it came from."""

    source: str
    arch: str
    text: str

    @property
    def degraded(self) -> bool:
        """No capability line was found; only a standard build is possible."""
        return not self.text

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "arch": self.arch,
            "text": self.text,
            "degraded": self.degraded,
        }


def classify_arch(machine: str) -> str:
    """Normalize ``platform.machine()`` to ``x86_64`` or ``aarch64``.

    Raises:
        UnsupportedArchitectureError: Any other architecture.
    """
    m = machine.strip().lower()
    if m in X86_64_MACHINES or "x86_64" in m:
        return "x86_64"
    if m in AARCH64_MACHINES:
        return "aarch64"
    raise UnsupportedArchitectureError(machine)


def _first_line_containing(path: Path, needle: str) -> str:
    """First line of ``path`` containing ``needle``, or ``""``."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                if needle in line:
                    return line.strip()
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
    return ""


def _sysctl_features() -> str:
    """Every ``sysctl -a`` line mentioning features, newline-joined."""
    try:
        r = subprocess.run(
            ["sysctl", "-a"],
            capture_output=True, text=True, timeout=10,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.warning("sysctl unavailable: %s", e)
        return ""
    lines = [
        line.strip()
        for line in r.stdout.splitlines()
        if SYSCTL_FEATURES_KEY in line.lower()
    ]
    return "\n".join(lines)


def detect_capabilities(
    *,
    cpuinfo_path: Path = CPUINFO_PATH,
    machine: str | None = None,
) -> CapabilityProbe:
    """Read the host's capability string.

    Args:
        cpuinfo_path: procfs cpuinfo file.  When it does not exist the
            host is treated as macOS and ``sysctl`` is queried.
        machine: Override for ``platform.machine()``.

    Returns:
        A CapabilityProbe.  An empty ``text`` means detection degraded
        and the build proceeds without target features.

    Raises:
        UnsupportedArchitectureError: procfs host that is neither
            x86_64 nor aarch64.
    """
    machine = machine if machine is not None else platform.machine()

    if cpuinfo_path.exists():
        arch = classify_arch(machine)
        key = CPUINFO_X86_KEY if arch == "x86_64" else CPUINFO_AARCH64_KEY
        text = _first_line_containing(cpuinfo_path, key)
        source = str(cpuinfo_path)
    else:
        arch = machine.lower()
        text = _sysctl_features()
        source = "sysctl"

    probe = CapabilityProbe(source=source, arch=arch, text=text.lower())
    if probe.degraded:
        logger.warning(
            "Detection degraded: no CPU capability line found via %s; "
            "target features disabled",
            source,
        )
    else:
        logger.debug("CPU capabilities (%s): %s", source, probe.text)
    return probe
