"""
Configuration loader — reads box.yml into domain models.

This is the primary entry point for loading tool configuration.
It reads YAML, validates against Pydantic schemas, and returns
typed domain objects.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from boxtools.core.errors import ConfigurationError
from boxtools.core.models.tool import BoxConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "box.yml"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for box.yml starting from the given directory, walking up.

    This allows running commands from subdirectories and still finding
    the project root.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to box.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(40):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> BoxConfig:
    """Load and validate box.yml.

    Args:
        path: Explicit path to box.yml. If None, searches upward.

    Returns:
        Validated BoxConfig model.

    Raises:
        ConfigurationError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigurationError(
            f"No {CONFIG_FILE} found. "
            "Run 'box add <type> <source>' to create one, or specify --config."
        )

    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

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

    if data.get("tools") is None:
        data["tools"] = []

    try:
        config = BoxConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded %d tool(s) from %s", len(config.tools), path)
    return config


def load_config_or_empty(path: Path | None = None) -> BoxConfig:
    """Like ``load_config`` but falls back to an empty config.

    Used by commands (run, env) that still work without box.yml,
    just without custom environment variables.
    """
    try:
        return load_config(path)
    except ConfigurationError as e:
        logger.debug("No usable config (%s) — using empty config", e)
        return BoxConfig()


def save_config(config: BoxConfig, path: Path) -> None:
    """Write the configuration back to box.yml."""
    data = config.model_dump(mode="json", exclude_defaults=True)
    data.setdefault("tools", [])
    content = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    path.write_text(content, encoding="utf-8")
    logger.debug("Config saved to %s", path)
