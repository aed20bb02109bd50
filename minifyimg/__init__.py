"""minifyimg - Batch image minification through pluggable transform chains.

    >>> from minifyimg import ProcessOptions, run_batch
    >>> results = await run_batch(["src/images/**/*"], ProcessOptions(destination="dist"))
"""

from minifyimg.core.constants import MINIFYIMG_VERSION as __version__
from minifyimg.core.filetype import BinaryFormat, detect_format
from minifyimg.core.validators import InvalidConfiguration
from minifyimg.engine import (
    BatchEngine,
    BatchError,
    FileResult,
    ProcessOptions,
    run_batch,
    run_batch_sync,
    transform_buffer,
    transform_buffer_sync,
)
from minifyimg.transforms import Transform, TransformError, TransformPipeline, compose

__all__ = [
    "__version__",
    "BatchEngine",
    "BatchError",
    "BinaryFormat",
    "FileResult",
    "InvalidConfiguration",
    "ProcessOptions",
    "Transform",
    "TransformError",
    "TransformPipeline",
    "compose",
    "detect_format",
    "run_batch",
    "run_batch_sync",
    "transform_buffer",
    "transform_buffer_sync",
]
