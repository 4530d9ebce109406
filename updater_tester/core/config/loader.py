"""
Configuration loader — reads an optional tester YAML file into settings.

Without a file every default in ``TesterSettings`` applies. A file may
override any subset of fields, either flat or wrapped under a
``tester:`` key::

    tester:
      timeouts:
        probe: 10
      endpoints:
        fastfetch_repo: my-fork/fastfetch
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from updater_tester.core.models.settings import TesterSettings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "UPDATER_TESTER_CONFIG"


class ConfigError(Exception):
    """Raised when a tester configuration file is invalid or missing."""


def resolve_config_path(explicit: Path | None = None) -> Path | None:
    """Explicit path first, then ``$UPDATER_TESTER_CONFIG``, else None."""
    if explicit is not None:
        return explicit
    env = os.environ.get(CONFIG_ENV_VAR)
    return Path(env) if env else None


def load_settings(path: Path | None = None) -> TesterSettings:
    """Load and validate tester settings.

    Args:
        path: Explicit YAML path. If None, ``$UPDATER_TESTER_CONFIG`` is
            consulted; if that is unset too, defaults are returned.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    path = resolve_config_path(path)
    if path is None:
        return TesterSettings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading tester config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return TesterSettings()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    settings_data = data.get("tester", data)
    if not isinstance(settings_data, dict):
        raise ConfigError(f"Expected 'tester' to be a mapping in {path}")

    try:
        settings = TesterSettings.model_validate(settings_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid tester configuration: {e}") from e

    logger.info("Loaded tester config from %s", path)
    return settings
