#!/usr/bin/env python3
"""Transform pipeline for chaining content transformations.

This module composes an ordered list of transforms into one coroutine:
- Strict left-to-right execution, each step fed the previous output
- Sync and async transforms mixed freely
- Halt on the first error, which propagates unchanged
- Pipeline run statistics

Example:
    >>> pipeline = TransformPipeline([strip_metadata, to_webp])
    >>> data = await pipeline.apply(content)
    >>> run = compose([strip_metadata, to_webp])
    >>> data = await run(content)
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from minifyimg.core.constants import TransformCallable
from minifyimg.core.validators import validate_plugins
from minifyimg.transforms.base import ensure_bytes, transform_name

ChainCallable = Callable[[bytes], Awaitable[bytes]]


async def run_chain(transforms: Sequence[TransformCallable], content: bytes) -> bytes:
    """Apply transforms to content in order.

    An empty chain returns content itself. Any exception raised by a
    transform stops the chain and is re-raised as is.
    """
    current = content
    for transform in transforms:
        result = transform(current)
        if inspect.isawaitable(result):
            result = await result
        current = ensure_bytes(result, transform)
    return current


def compose(plugins: Optional[Sequence[TransformCallable]]) -> ChainCallable:
    """Compose plugins into a single async callable.

    Args:
        plugins: Ordered transforms, or None for the identity

    Returns:
        Coroutine function mapping bytes to bytes

    Raises:
        InvalidConfiguration: If plugins is not a list of callables
    """
    transforms = tuple(validate_plugins(plugins))

    async def chain(content: bytes) -> bytes:
        return await run_chain(transforms, content)

    chain.__qualname__ = "chain[" + ", ".join(transform_name(t) for t in transforms) + "]"
    return chain


class TransformPipeline:
    """Ordered, reusable chain of transforms.

    Features:
    - Sequential transform execution
    - Halts on the first failing transform
    - Run statistics
    """

    def __init__(self, transforms: Optional[Sequence[TransformCallable]] = None):
        """Initialize transform pipeline.

        Args:
            transforms: Initial transforms, in execution order

        Raises:
            InvalidConfiguration: If transforms is not a list of callables
        """
        self._transforms: List[TransformCallable] = validate_plugins(transforms)
        self._stats = {
            "total_pipelines": 0,
            "successful_pipelines": 0,
            "failed_pipelines": 0,
        }

    def add_transform(self, transform: TransformCallable) -> None:
        """Append a transform; transforms run in the order they are added."""
        self._transforms.extend(validate_plugins([transform]))

    def clear_transforms(self) -> None:
        """Remove all transforms from pipeline."""
        self._transforms.clear()

    def get_transforms(self) -> List[TransformCallable]:
        """Return a copy of the transforms in execution order."""
        return self._transforms.copy()

    async def apply(self, content: bytes) -> bytes:
        """Run content through every transform.

        Args:
            content: Input content

        Returns:
            Output of the last transform (content itself when empty)
        """
        self._stats["total_pipelines"] += 1
        try:
            result = await run_chain(tuple(self._transforms), content)
        except Exception:
            self._stats["failed_pipelines"] += 1
            raise
        self._stats["successful_pipelines"] += 1
        return result

    async def __call__(self, content: bytes) -> bytes:
        return await self.apply(content)

    def get_stats(self) -> Dict[str, Any]:
        """Return pipeline statistics, including per-transform counters."""
        stats: Dict[str, Any] = self._stats.copy()
        stats["transform_stats"] = {
            transform_name(t): t.get_stats() for t in self._transforms if hasattr(t, "get_stats")
        }
        return stats

    def reset_stats(self) -> None:
        """Reset all statistics."""
        for key in self._stats:
            self._stats[key] = 0
        for transform in self._transforms:
            if hasattr(transform, "reset_stats"):
                transform.reset_stats()

    def __len__(self) -> int:
        return len(self._transforms)

    def __repr__(self) -> str:
        names = [transform_name(t) for t in self._transforms]
        return f"<TransformPipeline transforms={names}>"
