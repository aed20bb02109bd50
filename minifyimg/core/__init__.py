"""minifyimg Core - Shared utilities and infrastructure.

Import specific functions from submodules:
    from minifyimg.core.config import ConfigManager
    from minifyimg.core import constants
    from minifyimg.core import file_ops
    from minifyimg.core import filetype
    from minifyimg.core import logging
    from minifyimg.core import path_utils
    from minifyimg.core import validators
"""

from minifyimg.core import (
    config,
    constants,
    file_ops,
    filetype,
    logging,
    path_utils,
    validators,
)

__all__ = [
    "config",
    "constants",
    "file_ops",
    "filetype",
    "logging",
    "path_utils",
    "validators",
]
