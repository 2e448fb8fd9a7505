"""
Configuration loader for tag_semver.

A project may place a JSON file named ``.tag_semver.json`` in its
repository root to change the stage sets, the tag prefix, the default
scope and stage, or to turn off build metadata. Every key is optional
and a missing file simply means "use the defaults".

If the file exists but is malformed, has unknown keys, or has fields of
the wrong type, a :class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


CONFIG_FILE_NAME = ".tag_semver.json"

DEFAULTS: Dict[str, Any] = {
    "untagged_stages": None,
    "tagged_stages": None,
    "scope": None,
    "stage": None,
    "tag_prefix": "v",
    "build_metadata": True,
}


class ConfigError(Exception):
    """Raised when the configuration file is invalid."""

    pass


def _check_stage_list(data: Dict[str, Any], key: str) -> None:
    value = data.get(key)
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")


def load_config(repo_root: Optional[Path] = None, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the tag_semver configuration and return it merged over the defaults.

    Args:
        repo_root: Repository root to look for ``.tag_semver.json`` in.
        config_path: Explicit configuration file. Unlike the file in the
                     repository root, it must exist.

    Returns:
        A dictionary with the keys:
        - untagged_stages (list of str or None): None means the built-in default
        - tagged_stages (list of str or None): None means the built-in default
        - scope (str or None): default scope
        - stage (str or None): default stage
        - tag_prefix (str): prefix stripped from tag names, default "v"
        - build_metadata (bool): whether non-final stages get build metadata

    Raises:
        ConfigError: If the configuration file is unreadable or invalid.
    """
    config = dict(DEFAULTS)

    if config_path is None:
        if repo_root is None:
            logger.debug("No repository root given; using default configuration")
            return config
        config_path = repo_root / CONFIG_FILE_NAME
        if not config_path.exists():
            logger.debug("No configuration file at %s; using defaults", config_path)
            return config
    elif not config_path.exists():
        logger.error("Configuration file '%s' does not exist", config_path)
        raise ConfigError(f"Missing configuration file: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    unknown = sorted(key for key in data if key not in DEFAULTS)
    if unknown:
        logger.error("Configuration file has unknown keys: %s", unknown)
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    _check_stage_list(data, "untagged_stages")
    _check_stage_list(data, "tagged_stages")
    for key in ("scope", "stage"):
        if data.get(key) is not None and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    if "tag_prefix" in data and not isinstance(data["tag_prefix"], str):
        raise ConfigError("'tag_prefix' must be a string")
    if "build_metadata" in data and not isinstance(data["build_metadata"], bool):
        raise ConfigError("'build_metadata' must be a boolean")

    config.update(data)
    logger.debug("Loaded configuration from: %s", config_path)
    logger.debug("Configuration data: %s", config)
    return config
