#!/usr/bin/env python3
"""Base classes for content transformations.

A transform in minifyimg is anything callable as ``transform(data)`` that
returns bytes, either directly or as an awaitable. This module provides:
- Transform abstract base class for class-based plugins
- TransformError for error handling
- ensure_bytes() to check what a transform returned

Example:
    >>> class UppercaseTransform(Transform):
    ...     async def transform(self, content):
    ...         return content.upper()
    ...
    >>> await UppercaseTransform()(b"hello")
    b'HELLO'
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from minifyimg.core.constants import ErrorCode


class TransformError(Exception):
    """Error during transformation."""

    def __init__(self, message: str, transform_name: Optional[str] = None):
        self.message = message
        self.transform_name = transform_name
        self.error_code = ErrorCode.TRANSFORM_FAILED
        super().__init__(message)


def transform_name(transform: Any) -> str:
    """Return a readable name for any transform callable."""
    name = getattr(transform, "name", None)
    if isinstance(name, str):
        return name
    return getattr(transform, "__qualname__", None) or type(transform).__name__


def ensure_bytes(value: Any, transform: Any) -> bytes:
    """Check that a transform returned a binary buffer.

    Raises:
        TransformError: If value is not bytes, bytearray or memoryview
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    name = transform_name(transform)
    raise TransformError(
        f"{name}: expected bytes from transform, got {type(value).__name__}", name
    )


class Transform(ABC):
    """Abstract base class for class-based transforms.

    Subclasses implement the coroutine transform(). Instances are callable,
    so they can be put directly into a plugin list.
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize transform.

        Args:
            name: Optional name for this transform
        """
        self.name = name or self.__class__.__name__
        self._stats = {
            "total_transforms": 0,
            "failed_transforms": 0,
        }

    @abstractmethod
    async def transform(self, content: bytes) -> bytes:
        """Transform content.

        Args:
            content: Input content

        Returns:
            Transformed content

        Raises:
            TransformError: If transformation fails
        """

    async def __call__(self, content: bytes) -> bytes:
        """Run transform() and keep count of runs and failures."""
        self._stats["total_transforms"] += 1
        try:
            result = await self.transform(content)
        except Exception:
            self._stats["failed_transforms"] += 1
            raise
        return ensure_bytes(result, self)

    def get_stats(self) -> Dict[str, int]:
        """Return run counters for this transform."""
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset run counters."""
        self._stats = {
            "total_transforms": 0,
            "failed_transforms": 0,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
