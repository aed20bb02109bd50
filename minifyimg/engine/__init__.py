"""minifyimg Engine - Batch processing of files through transform chains.

- run_batch / BatchEngine: discover, transform and write a set of files
- transform_buffer: run a transform chain over an in-memory buffer
- FileProcessor: per-file read, transform, write
"""

from .batch import (
    BatchEngine,
    BatchError,
    build_options,
    run_batch,
    run_batch_sync,
    transform_buffer,
    transform_buffer_sync,
)
from .processor import FileProcessor, handle_file
from .results import FileResult, ProcessOptions

__all__ = [
    "BatchEngine",
    "BatchError",
    "FileProcessor",
    "FileResult",
    "ProcessOptions",
    "build_options",
    "handle_file",
    "run_batch",
    "run_batch_sync",
    "transform_buffer",
    "transform_buffer_sync",
]
