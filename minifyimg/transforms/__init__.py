"""minifyimg Transforms - Content transformation system.

This module provides the transform chain applied to every file:
- Transform: base class for class-based plugins
- TransformPipeline / compose: ordered chaining of transforms
- TransformError for plugin failures
"""

from .base import Transform, TransformError, ensure_bytes, transform_name
from .pipeline import TransformPipeline, compose, run_chain

__all__ = [
    # Pipeline
    "TransformPipeline",
    "compose",
    "run_chain",
    # Base classes
    "Transform",
    "TransformError",
    "ensure_bytes",
    "transform_name",
]
