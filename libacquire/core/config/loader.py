"""
Configuration loader — reads libacquire.yml into the config model.

This is the primary entry point for loading the acquisition
descriptor.  It reads YAML, validates against the Pydantic schema,
and anchors relative paths at the directory holding the file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from libacquire.core.models.config import AcquireConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "libacquire.yml"


class ConfigError(Exception):
    """Raised when the acquisition descriptor is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for libacquire.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to libacquire.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> AcquireConfig:
    """Load and validate the acquisition descriptor.

    Args:
        path: Explicit path to libacquire.yml. If None, searches upward.

    Returns:
        Validated AcquireConfig with ``install_root`` made absolute.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(
            f"No {CONFIG_FILE} found. "
            "Create one at the repository root, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading acquisition config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = AcquireConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid acquisition configuration: {e}") from e

    config.install_root = str((path.parent / config.install_root).resolve())

    logger.info(
        "Loaded config for '%s' from %s (%d required features)",
        config.library, config.repository, len(config.required_features),
    )
    return config
