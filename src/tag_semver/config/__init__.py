"""
Configuration loading for tag_semver.

Provides a loader for the optional ``.tag_semver.json`` file in the
repository root. See :mod:`tag_semver.config.loader` for details.
"""

from .loader import CONFIG_FILE_NAME, ConfigError, load_config  # noqa: F401
