#!/usr/bin/env python3
"""Main entry point for a minifyimg run.

This module handles:
- Plugin resolution from configured names
- Output directory cleanup
- Running the batch on a fresh event loop
- Reporting the number of minified images

Example:
    >>> from minifyimg.main import run_minifyimg
    >>> run_minifyimg(config, logger)
"""

import asyncio
from typing import List, Optional, Sequence

from minifyimg.core.config import ConfigManager
from minifyimg.core.constants import ConfigKey, TransformCallable
from minifyimg.core.file_ops import clean_directory
from minifyimg.core.logging import Logger
from minifyimg.engine.batch import BatchEngine
from minifyimg.engine.results import FileResult, ProcessOptions
from minifyimg.plugins.registry import PluginRegistry, get_default_registry


def plural(word: str, count: int) -> str:
    """Return word, pluralised when count is not 1."""
    return word if count == 1 else f"{word}s"


def build_process_options(
    config: ConfigManager, plugins: Sequence[TransformCallable]
) -> ProcessOptions:
    """Build the engine options from the merged configuration."""
    return ProcessOptions(
        destination=config.get(ConfigKey.OUT_DIR),
        preserve_structure=bool(config.get(ConfigKey.DEEP_COPY, True)),
        plugins=list(plugins),
        use_glob=bool(config.get(ConfigKey.GLOB, True)),
    )


class MinifyImgMain:
    """
    Runs one minification job from a merged configuration.
    """

    def __init__(
        self,
        config: ConfigManager,
        logger: Logger,
        registry: Optional[PluginRegistry] = None,
    ):
        """
        Initialize the job.

        Args:
            config: Merged configuration
            logger: Logger instance
            registry: Plugin registry (defaults to built-in and installed plugins)
        """
        self.config = config
        self.logger = logger
        self.registry = registry or get_default_registry()

    def resolve_plugins(self) -> List[TransformCallable]:
        """Create the configured plugins, webp last when requested."""
        names = self.config.plugin_names()
        self.logger.debug("Resolving plugins", plugins=",".join(names))
        return self.registry.resolve(names, self.config.get("plugin_options", {}))

    def clean_output(self) -> List[str]:
        """Delete the output directory if cleaning is enabled."""
        out_dir = self.config.get(ConfigKey.OUT_DIR)
        if not out_dir or not self.config.get(ConfigKey.CLEAN, True):
            return []

        deleted = clean_directory(out_dir)
        if deleted:
            self.logger.info(
                "Files and directories that were deleted:\n" + "\n".join(deleted)
            )
        return deleted

    async def run_async(self) -> List[FileResult]:
        """Resolve plugins, validate the batch, clean the output and run it.

        The output directory is only deleted once the batch configuration
        has been accepted.
        """
        plugins = self.resolve_plugins()
        options = build_process_options(self.config, plugins)
        input_specs = self.config.input_specs()
        engine = BatchEngine(input_specs, options, logger=self.logger)

        self.clean_output()

        self.logger.info("Minifying images", patterns=",".join(input_specs))
        return await engine.run()

    def run(self) -> List[FileResult]:
        """Run the job on a new event loop."""
        files = asyncio.run(self.run_async())
        self.logger.info(f"{len(files)} {plural('image', len(files))} minified")
        return files


def run_minifyimg(config: ConfigManager, logger: Logger) -> int:
    """
    Run minifyimg with the given configuration.

    Returns:
        Process exit code
    """
    MinifyImgMain(config, logger).run()
    return 0
