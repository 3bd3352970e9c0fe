"""
Configuration loader — reads seat-installer.yml into InstallerConfig.

The file is optional. When none is found the defaults describe a
standard single-host SeAT install.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from seat_installer.core.errors import ConfigurationError
from seat_installer.core.models.config import InstallerConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "seat-installer.yml"
SYSTEM_CONFIG = Path("/etc/seat-installer") / CONFIG_FILE


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for seat-installer.yml from ``start_dir`` upward, then /etc.

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    if SYSTEM_CONFIG.is_file():
        return SYSTEM_CONFIG
    return None


def load_config(path: Path | None = None) -> InstallerConfig:
    """Load and validate installer configuration.

    Args:
        path: Explicit config path. If None, searches; if nothing is
            found, returns the defaults.

    Raises:
        ConfigurationError: If an explicit file is missing or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return InstallerConfig()

    if not path.is_file():
        if explicit:
            raise ConfigurationError(f"Config file not found: {path}")
        return InstallerConfig()

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = InstallerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid installer configuration in {path}: {e}") from e

    logger.info("Loaded installer config from %s", path)
    return config
