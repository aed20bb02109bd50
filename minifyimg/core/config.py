#!/usr/bin/env python3
"""Layered configuration for the minifyimg command line.

This module merges configuration from several sources:
- Compiled defaults
- Command-line arguments
- The project file (minifyimg.json / minifyimg.yaml) in the working directory
- Environment variables (MINIFYIMG_*)
- Runtime overrides

The project file wins over command-line flags, so a checked-in
minifyimg.json pins the settings of a project.

Example:
    >>> config = ConfigManager()
    >>> config.load_dict({"out_dir": "dist"}, ConfigSource.CLI_ARGS)
    >>> config.load_project_file(".")
    >>> config.get("out_dir")
    'dist'
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import yaml

from minifyimg.core.constants import (
    DEFAULT_CONFIG,
    ENV_PREFIX,
    PROJECT_CONFIG_FILES,
    ConfigKey,
    ErrorCode,
)


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    CLI_ARGS = 2
    PROJECT_FILE = 3
    ENVIRONMENT = 4
    RUNTIME = 5  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe layered configuration.

    Values are looked up from the highest precedence source down; nested
    mappings are addressed with dot-separated keys ("logging.level").
    """

    def __init__(self, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            load_environment: Read MINIFYIMG_* variables on creation
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)
        self.loaded_file: Optional[Path] = None

        if load_environment:
            self._load_environment()

    def load_file(
        self, file_path: Union[str, Path], source: ConfigSource = ConfigSource.PROJECT_FILE
    ) -> None:
        """Load configuration from a JSON or YAML file.

        JSON is a subset of YAML, so both are read with yaml.safe_load.

        Args:
            file_path: Path to config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        path = Path(file_path).expanduser()

        if not path.is_file():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Parse error in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigError(
                f"Error loading config {file_path}: {e}", ErrorCode.PERMISSION_DENIED
            ) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}: expected a mapping")

        with self._lock:
            self._config[source] = _normalize_keys(config_data)
            self.loaded_file = path

    def load_project_file(
        self, directory: Union[str, Path], names: Sequence[str] = PROJECT_CONFIG_FILES
    ) -> Optional[Path]:
        """Load the first project config file found in directory.

        Args:
            directory: Directory to search
            names: Candidate file names, in lookup order

        Returns:
            Path of the loaded file, or None if there is none
        """
        for name in names:
            candidate = Path(directory) / name
            if candidate.is_file():
                self.load_file(candidate, ConfigSource.PROJECT_FILE)
                return candidate
        return None

    def load_dict(
        self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Load configuration from a dictionary.

        Keys whose value is None are dropped, so unset CLI flags do not
        hide lower-precedence values.
        """
        cleaned = {k: v for k, v in _normalize_keys(config_data).items() if v is not None}
        with self._lock:
            self._config[source] = cleaned

    def _load_environment(self) -> None:
        """Load configuration from environment variables.

        MINIFYIMG_OUT_DIR=dist sets "out_dir"; MINIFYIMG_LOGGING__LEVEL=DEBUG
        sets "logging.level" (double underscore separates nesting).
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split("__")
            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = env_config

    def _parse_env_value(self, value: str) -> Any:
        """Parse an environment value as bool, int, float, list or str."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        if "," in value:
            return [item.strip() for item in value.split(",") if item.strip()]

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Key path (e.g., "logging.level")
            default: Value returned when no source defines key

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value at the given source level."""
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Return the merged configuration from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def input_specs(self) -> list:
        """Return the configured input patterns as a list."""
        value = self.get(ConfigKey.INPUT_DIR)
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            raise ConfigError(f"`{ConfigKey.INPUT_DIR}` must be a string or a list")
        return list(value)

    def plugin_names(self) -> list:
        """Return the plugin names to run, with webp appended when requested."""
        value = self.get(ConfigKey.PLUGINS, [])
        names = [value] if isinstance(value, str) else list(value)
        if self.get(ConfigKey.USE_WEBP, False) and "webp" not in names:
            names.append("webp")
        return names

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear one source, or every source except the defaults."""
        with self._lock:
            if source:
                if source != ConfigSource.COMPILED_DEFAULTS:
                    self._config.pop(source, None)
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


# camelCase spellings accepted in config files
_KEY_ALIASES = {
    "inputDir": ConfigKey.INPUT_DIR,
    "outDir": ConfigKey.OUT_DIR,
    "useWebp": ConfigKey.USE_WEBP,
    "deepCopy": ConfigKey.DEEP_COPY,
    "plugin": ConfigKey.PLUGINS,
}


def _normalize_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    return {_KEY_ALIASES.get(key, key): value for key, value in config.items()}
