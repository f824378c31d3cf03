"""
scopy Configuration

Loads defaults from a YAML settings file and environment variables, then
merges command-line values on top to produce the Config for a run.

Precedence (highest first): command line, environment, settings file,
built-in defaults.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from scopy.errors import ConfigError
from scopy.processor import DEFAULT_HEADER_FORMAT, Config

logger = logging.getLogger(__name__)


# Settings file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path(".scopy.yaml"),
    Path.home() / ".scopy" / "config.yaml",
]


DEFAULT_CONFIG: Dict[str, Any] = {
    "header_format": DEFAULT_HEADER_FORMAT,
    "exclude": "",                 # Comma-separated substrings
    "max_size": "",                # e.g. "500KB", empty = unlimited
    "strip_comments": False,
    "include_dot_files": False,
    "follow_symlinks": False,
}


ENV_MAPPINGS = {
    "SCOPY_HEADER_FORMAT": "header_format",
    "SCOPY_EXCLUDE": "exclude",
    "SCOPY_MAX_SIZE": "max_size",
    "SCOPY_STRIP_COMMENTS": "strip_comments",
    "SCOPY_INCLUDE_DOT_FILES": "include_dot_files",
    "SCOPY_FOLLOW_SYMLINKS": "follow_symlinks",
}

SIZE_MULTIPLIERS = [
    ("KB", 1024),
    ("MB", 1024 * 1024),
    ("GB", 1024 * 1024 * 1024),
]


def parse_size(size_str: str) -> int:
    """
    Convert a size like ``500KB`` to bytes.

    Suffixes KB, MB and GB (any case) are powers of 1024; no suffix means
    bytes. An empty string means no limit (0).

    Raises:
        ConfigError: if the number part is not plain decimal digits
    """
    text = size_str.strip().upper()
    if not text:
        return 0

    multiplier = 1
    for suffix, factor in SIZE_MULTIPLIERS:
        if text.endswith(suffix):
            multiplier = factor
            text = text[:-len(suffix)]
            break

    if not (text.isascii() and text.isdigit()):
        raise ConfigError(f"error parsing maximum size: invalid size {size_str!r}")

    return int(text) * multiplier


def parse_bool(value: Any) -> bool:
    """Interpret a settings/env value as a flag."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def split_patterns(value: Any) -> List[str]:
    """Split a comma-separated pattern string (lists pass through)."""
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return str(value or "").split(",")


class ScopySettings:
    """User defaults for scopy, from a settings file and the environment."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        self._load_config(config_path)
        self._apply_env_overrides()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load settings from the first YAML file found."""
        search_paths = [explicit_path] if explicit_path else CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if config_path and config_path.exists():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        user_config = yaml.safe_load(f) or {}
                    if not isinstance(user_config, dict):
                        raise ValueError("top level must be a mapping")
                    self._config.update(user_config)
                    self._config_path = config_path
                    return
                except (OSError, ValueError, yaml.YAMLError) as e:
                    logger.warning(f"Failed to load settings from {config_path}: {e}")

    def _apply_env_overrides(self) -> None:
        for env_var, config_key in ENV_MAPPINGS.items():
            if env_var in os.environ:
                self._config[config_key] = os.environ[env_var]

    @property
    def config_path(self) -> Optional[Path]:
        """Path to the loaded settings file, or None if using defaults."""
        return self._config_path

    @property
    def header_format(self) -> str:
        return str(self._config["header_format"])

    @property
    def exclude_patterns(self) -> List[str]:
        return split_patterns(self._config["exclude"])

    @property
    def max_size(self) -> str:
        return str(self._config["max_size"] or "")

    @property
    def strip_comments(self) -> bool:
        return parse_bool(self._config["strip_comments"])

    @property
    def include_dot_files(self) -> bool:
        return parse_bool(self._config["include_dot_files"])

    @property
    def follow_symlinks(self) -> bool:
        return parse_bool(self._config["follow_symlinks"])

    def to_dict(self) -> Dict[str, Any]:
        """Export current settings as dict."""
        return {
            "header_format": self.header_format,
            "exclude": self.exclude_patterns,
            "max_size": self.max_size,
            "strip_comments": self.strip_comments,
            "include_dot_files": self.include_dot_files,
            "follow_symlinks": self.follow_symlinks,
            "config_file": str(self._config_path) if self._config_path else None,
        }


def build_config(
    settings: ScopySettings,
    extensions: Iterable[str],
    header_format: Optional[str] = None,
    exclude: Optional[str] = None,
    max_size: Optional[str] = None,
    strip_comments: bool = False,
    include_dot_files: bool = False,
    follow_symlinks: bool = False,
    output_to_memory: bool = True,
) -> Config:
    """
    Resolve command-line values over settings into a run Config.

    None (or False for flags) means "not given on the command line".

    Raises:
        ConfigError: on a bad size, a bad header format or no extensions
    """
    extensions = tuple(ext for ext in extensions if ext.strip('.'))
    if not extensions:
        raise ConfigError("at least one extension is required")

    header_format = header_format if header_format is not None else settings.header_format

    exclude_patterns = split_patterns(exclude) if exclude is not None else settings.exclude_patterns
    size = parse_size(max_size if max_size is not None else settings.max_size)

    return Config(
        header_format=header_format,
        exclude_patterns=tuple(exclude_patterns),
        max_size=size,
        strip_comments=strip_comments or settings.strip_comments,
        extensions=extensions,
        output_to_memory=output_to_memory,
        include_dot_files=include_dot_files or settings.include_dot_files,
        follow_symlinks=follow_symlinks or settings.follow_symlinks,
    )
