"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    CLI flag  >  LIBACQUIRE_LOG_LEVEL env var  >  WARNING (default)

Console lines name the acquisition component that emitted them
(``execution.download``, ``reliability.retry``) rather than the full
module path.  Optional file output via LIBACQUIRE_LOG_FILE /
LIBACQUIRE_LOG_FILE_LEVEL keeps full logger names.
"""

from __future__ import annotations

import logging
import sys

# Module-path prefixes dropped from console component names, longest first
_COMPONENT_PREFIXES = (
    "libacquire.core.services.acquire.",
    "libacquire.core.",
    "libacquire.",
)

# ── Format strings ──────────────────────────────────────────────

_FMT_CONSOLE = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s [%(component)s:%(lineno)d] %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(component)s] %(message)s", "%H:%M:%S"),
    logging.WARNING: ("%(levelname)s: %(message)s", None),
}

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def component_name(logger_name: str) -> str:
    """Short component name for a libacquire logger, e.g. ``execution.download``."""
    for prefix in _COMPONENT_PREFIXES:
        if logger_name.startswith(prefix):
            return logger_name[len(prefix):]
    return logger_name


class _ComponentFilter(logging.Filter):
    """Attach ``record.component`` for the console formats."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = component_name(record.name)
        return True


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = _parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    fmt, datefmt = _console_format(numeric_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.addFilter(_ComponentFilter())
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # A console stream closed under us (test runners) must not raise
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric


def _console_format(numeric_level: int) -> tuple[str, str | None]:
    if numeric_level <= logging.DEBUG:
        return _FMT_CONSOLE[logging.DEBUG]
    if numeric_level <= logging.INFO:
        return _FMT_CONSOLE[logging.INFO]
    return _FMT_CONSOLE[logging.WARNING]
