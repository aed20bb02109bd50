#!/usr/bin/env python3
"""Batch and buffer entry points.

This module is the public face of the engine:
- run_batch(): discover files and process all of them concurrently
- transform_buffer(): run the plugin chain over an in-memory buffer
- BatchError: the fail-fast error raised when any file of a batch fails

Batches are all-or-nothing. Every file is processed as its own task on the
running event loop; the first failure cancels the tasks still pending and
is raised as a BatchError naming the input patterns and the file.

Example:
    >>> results = await run_batch(
    ...     ["src/images/**/*"],
    ...     ProcessOptions(destination="assets/images", plugins=[optimize_png]),
    ... )
    >>> [r.destination_path for r in results]
    ['assets/images/logo.png', 'assets/images/banner.png']
"""

import asyncio
import traceback
from typing import Any, List, Mapping, Optional, Sequence, Union

from minifyimg.core.constants import ErrorCode, TransformCallable
from minifyimg.core.logging import Logger, get_logger
from minifyimg.core.validators import (
    InvalidConfiguration,
    ValidationError,
    structure_template,
    validate_buffer,
    validate_input_specs,
    validate_literal_specs,
    validate_plugins,
    validate_structure_template,
)
from minifyimg.engine.processor import FileProcessor
from minifyimg.engine.results import FileResult, ProcessOptions
from minifyimg.rules.discovery import PathMatcher
from minifyimg.transforms.pipeline import compose

OptionsArg = Union[ProcessOptions, Mapping[str, Any], None]


class BatchError(Exception):
    """A file of a batch failed; the whole batch is abandoned.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, input_specs: Sequence[str], source_path: str, cause: BaseException):
        self.input_specs = list(input_specs)
        self.source_path = source_path
        self.error_code = _error_code_for(cause)
        stack = "".join(traceback.format_exception(cause)).rstrip()
        message = (
            f"Error occurred when handling file: {', '.join(self.input_specs)}\n\n"
            f"Source: {source_path}\n\n{stack}"
        )
        super().__init__(message)


def _error_code_for(exc: BaseException) -> ErrorCode:
    if isinstance(exc, FileNotFoundError):
        return ErrorCode.NOT_FOUND
    if isinstance(exc, PermissionError):
        return ErrorCode.PERMISSION_DENIED
    if isinstance(exc, ValidationError):
        return exc.error_code
    if isinstance(exc, OSError):
        return ErrorCode.INTERNAL_ERROR
    code = getattr(exc, "error_code", None)
    return code if isinstance(code, ErrorCode) else ErrorCode.TRANSFORM_FAILED


def build_options(options: OptionsArg = None, **overrides: Any) -> ProcessOptions:
    """Build ProcessOptions from an instance or a mapping, plus keyword overrides.

    Raises:
        InvalidConfiguration: On unknown option names
    """
    if options is None:
        built = ProcessOptions()
    elif isinstance(options, ProcessOptions):
        built = options
    else:
        built = ProcessOptions.from_dict(options)

    if overrides:
        built = built.with_overrides(**overrides)
    return built


class BatchEngine:
    """Runs one batch: discovery, then every file concurrently.

    All validation happens in the constructor, so a misconfigured batch
    fails before touching the filesystem.
    """

    def __init__(
        self,
        input_specs: Sequence[str],
        options: OptionsArg = None,
        logger: Optional[Logger] = None,
        **overrides: Any,
    ):
        """Initialize batch engine.

        Args:
            input_specs: Glob patterns (or literal paths), first one is the template
            options: ProcessOptions or a mapping of option names
            logger: Logger for batch messages
            **overrides: Option values replacing those in options

        Raises:
            InvalidConfiguration: If inputs or options are malformed
        """
        self.input_specs = validate_input_specs(input_specs)
        self.options = build_options(options, **overrides)
        validate_plugins(self.options.plugins)
        if not self.options.use_glob:
            validate_literal_specs(self.input_specs)

        if self.options.destination and self.options.preserve_structure:
            if not self.options.use_glob:
                raise InvalidConfiguration(
                    "Preserving structure requires glob expansion; flatten the output "
                    "when using literal paths"
                )
            self.template = validate_structure_template(self.input_specs)
        else:
            self.template = structure_template(self.input_specs)

        self._logger = logger or get_logger()
        self._matcher = PathMatcher(use_glob=self.options.use_glob, logger=self._logger)
        self._processor = FileProcessor(self.options, self.template, logger=self._logger)

    async def discover(self) -> List[str]:
        """Expand the input patterns into the list of files to process."""
        return await asyncio.to_thread(self._matcher.expand, self.input_specs)

    async def _process_one(self, source_path: str) -> FileResult:
        with self._logger.add_context(source=source_path):
            try:
                return await self._processor.process(source_path)
            except Exception as exc:
                self._logger.exception("File processing failed", exc)
                raise BatchError(self.input_specs, source_path, exc) from exc

    async def run(self) -> List[FileResult]:
        """Process every discovered file.

        Returns:
            One FileResult per file, in discovery order

        Raises:
            BatchError: If any file fails; no results are returned
        """
        files = await self.discover()
        self._logger.info(
            "Processing files",
            files=len(files),
            destination=self.options.destination,
            plugins=len(self.options.plugins),
        )

        tasks = [asyncio.create_task(self._process_one(path)) for path in files]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        self._logger.info("Processed files", files=len(results))
        return list(results)


async def run_batch(
    input_specs: Sequence[str], options: OptionsArg = None, **overrides: Any
) -> List[FileResult]:
    """Discover, transform and write every file matched by input_specs.

    Args:
        input_specs: List of glob patterns or literal paths
        options: ProcessOptions or a mapping of option names
        **overrides: Option values replacing those in options

    Returns:
        FileResults in discovery order

    Raises:
        InvalidConfiguration: Before any I/O, if inputs or options are malformed
        BatchError: If any file fails
    """
    return await BatchEngine(input_specs, options, **overrides).run()


BufferPluginsArg = Union[Sequence[TransformCallable], ProcessOptions, Mapping[str, Any], None]


def _buffer_plugins(plugins: BufferPluginsArg) -> Any:
    """Return the plugin list from a list, ProcessOptions or ``{"plugins": [...]}``."""
    if isinstance(plugins, ProcessOptions):
        return plugins.plugins
    if isinstance(plugins, Mapping):
        unknown = sorted(set(plugins) - {"plugins"})
        if unknown:
            raise InvalidConfiguration(
                f"Only `plugins` applies to a buffer, got: {', '.join(unknown)}"
            )
        return plugins.get("plugins")
    return plugins


async def transform_buffer(data: bytes, plugins: BufferPluginsArg = None) -> bytes:
    """Run the plugin chain over an in-memory buffer.

    Args:
        data: Input buffer
        plugins: Ordered transforms, or options carrying them (a
            ProcessOptions, or a mapping with only a ``plugins`` key)

    Returns:
        The transformed buffer, or data itself when there are no plugins

    Raises:
        InvalidConfiguration: If data is not a buffer or plugins is malformed
    """
    validate_buffer(data)
    chain = compose(_buffer_plugins(plugins))
    return await chain(data)


def run_batch_sync(
    input_specs: Sequence[str], options: OptionsArg = None, **overrides: Any
) -> List[FileResult]:
    """Blocking wrapper around run_batch() for callers without an event loop."""
    return asyncio.run(run_batch(input_specs, options, **overrides))


def transform_buffer_sync(data: bytes, plugins: BufferPluginsArg = None) -> bytes:
    """Blocking wrapper around transform_buffer()."""
    return asyncio.run(transform_buffer(data, plugins))
