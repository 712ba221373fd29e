"""
Configuration loader — reads an optional YAML file into BootstrapSettings.

Lookup order:
    --config PATH  >  HMB_CONFIG env var  >  ~/.config/hmbootstrap/config.yml

When no file exists the built-in defaults are used unchanged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from hmbootstrap.core.models.settings import BootstrapSettings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "HMB_CONFIG"
DEFAULT_CONFIG_FILE = Path("~/.config/hmbootstrap/config.yml")


class ConfigError(Exception):
    """Raised when the bootstrap configuration file is invalid."""


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the configuration file to use, if any.

    An explicit path (CLI flag or env var) must exist; the default
    location is optional.

    Raises:
        ConfigError: If an explicitly requested file is missing.
    """
    if explicit is None and os.environ.get(CONFIG_ENV_VAR):
        explicit = Path(os.environ[CONFIG_ENV_VAR])

    if explicit is not None:
        explicit = explicit.expanduser()
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit

    default = DEFAULT_CONFIG_FILE.expanduser()
    return default if default.is_file() else None


def load_settings(path: Path | None = None) -> BootstrapSettings:
    """Load and validate bootstrap settings.

    Args:
        path: Explicit path to a YAML file. If None, searches the
            default locations and falls back to built-in defaults.

    Returns:
        Validated BootstrapSettings.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    path = find_config_file(path)
    if path is None:
        logger.debug("No config file found — using built-in defaults")
        return BootstrapSettings()

    logger.debug("Loading bootstrap config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "bootstrap" key or be flat
    if "bootstrap" in data and isinstance(data["bootstrap"], dict):
        data = data["bootstrap"]

    try:
        settings = BootstrapSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid bootstrap configuration in {path}: {e}") from e

    logger.info("Loaded bootstrap config from %s", path)
    return settings
