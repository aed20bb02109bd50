#!/usr/bin/env python3
"""Per-file processing.

Runs a single source file through the whole pipeline:
read -> transform chain -> format detection -> destination -> write.

Example:
    >>> processor = FileProcessor(ProcessOptions(destination="dist"), "src/**/*")
    >>> result = await processor.process("src/icons/logo.png")
    >>> result.destination_path
    'dist/logo.png'
"""

import os
from typing import Optional

from minifyimg.core.file_ops import make_dirs_async, read_bytes_async, write_bytes_async
from minifyimg.core.filetype import detect_format
from minifyimg.core.logging import Logger, get_logger
from minifyimg.core.path_utils import resolve_destination
from minifyimg.engine.results import FileResult, ProcessOptions
from minifyimg.transforms.pipeline import compose


class FileProcessor:
    """Processes files one at a time with a fixed set of options.

    A processor holds no per-file state, so one instance can serve every
    concurrent task of a batch.
    """

    def __init__(
        self,
        options: ProcessOptions,
        template: Optional[str] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize file processor.

        Args:
            options: Options of the batch
            template: First input pattern, used to preserve structure
            logger: Logger for per-file messages
        """
        self.options = options
        self.template = template
        self._logger = logger or get_logger()

    async def process(self, source_path: str) -> FileResult:
        """Process one file.

        Args:
            source_path: File to read

        Returns:
            FileResult with the transformed bytes

        Raises:
            OSError: If the file cannot be read or the output cannot be written
            InvalidConfiguration: If the plugin list is malformed
            Exception: Whatever a failing transform raised
        """
        data = await read_bytes_async(source_path)
        chain = compose(self.options.plugins)

        output = await chain(data)
        fmt = detect_format(output)

        destination_path = resolve_destination(
            source_path,
            self.options.destination,
            self.template,
            self.options.preserve_structure,
            fmt,
        )

        self._logger.debug(
            "Transformed file",
            source=source_path,
            size_in=len(data),
            size_out=len(output),
            format=fmt.extension or "unknown",
        )

        if destination_path is not None:
            await make_dirs_async(os.path.dirname(destination_path))
            await write_bytes_async(destination_path, output)
            self._logger.debug("Wrote file", source=source_path, destination=destination_path)

        return FileResult(data=output, source_path=source_path, destination_path=destination_path)


async def handle_file(
    source_path: str, options: ProcessOptions, template: Optional[str] = None
) -> FileResult:
    """Process a single file with a throwaway FileProcessor."""
    return await FileProcessor(options, template).process(source_path)
