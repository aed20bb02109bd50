"""
minifyimg Core: Constants and Type Definitions

This module provides system-wide constants, error codes, and type definitions
shared by the engine, the plugin registry and the CLI.
"""
from enum import IntEnum
from typing import Awaitable, Callable, TypeAlias, Union

# Version information
MINIFYIMG_VERSION = "1.0.0"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for minifyimg operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad pattern list, malformed options
    NOT_FOUND = 2  # Source file or config file doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Destination conflict
    DEPENDENCY_ERROR = 5  # Missing plugin or plugin library
    INTERNAL_ERROR = 6  # Bug in minifyimg
    TRANSFORM_FAILED = 7  # A plugin raised during the chain


# Type aliases for clarity
FilePath: TypeAlias = str
Pattern: TypeAlias = str
FileContent: TypeAlias = bytes
TransformCallable: TypeAlias = Callable[
    [bytes], Union[bytes, Awaitable[bytes]]
]

# Characters that start a wildcard in an input pattern
WILDCARD_CHARS = ("*", "?", "[")

# Prefix marking an input pattern as an exclusion
NEGATION_PREFIX = "!"

# Extension forced on files whose transformed content is WebP
WEBP_EXTENSION = "webp"

# OS artifacts and editor leftovers never picked up as inputs
JUNK_PATTERNS = (
    r"^npm-debug\.log$",
    r"^\..*\.swp$",
    r"^\.DS_Store$",
    r"^\.AppleDouble$",
    r"^\.LSOverride$",
    r"^Icon\r$",
    r"^\._.*",
    r"^\.Spotlight-V100(?:$|\n)",
    r"\.Trashes",
    r"^__MACOSX$",
    r"~$",
    r"^Thumbs\.db$",
    r"^ehthumbs\.db$",
    r"^Desktop\.ini$",
    r"@eaDir$",
)

# Plugins applied when the user does not pick any
DEFAULT_PLUGINS = ["gifsicle", "pngquant", "jpegtran", "svgo"]

# Project configuration files looked up in the working directory
PROJECT_CONFIG_FILES = ("minifyimg.json", "minifyimg.yaml", "minifyimg.yml")

# Environment variable prefix
ENV_PREFIX = "MINIFYIMG_"


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    INPUT_DIR = "input_dir"
    OUT_DIR = "out_dir"
    USE_WEBP = "use_webp"
    DEEP_COPY = "deep_copy"
    PLUGINS = "plugins"
    GLOB = "glob"
    CLEAN = "clean"
    LOGGING = "logging"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.INPUT_DIR: ["src/images/**/*"],
    ConfigKey.OUT_DIR: "assets/images",
    ConfigKey.USE_WEBP: False,
    ConfigKey.DEEP_COPY: True,
    ConfigKey.PLUGINS: list(DEFAULT_PLUGINS),
    ConfigKey.GLOB: True,
    ConfigKey.CLEAN: True,
    ConfigKey.LOGGING: {
        "level": "INFO",
        "file": None,
    },
}
