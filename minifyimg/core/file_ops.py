"""
minifyimg Core: File operations.

Byte-level reads and writes used by the engine, run in worker threads so
that they are suspension points for the event loop, plus removal of the
output directory before a CLI run.
"""
import asyncio
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

from minifyimg.core.validators import InvalidConfiguration


def read_bytes(path: str) -> bytes:
    """Read the full content of a file."""
    with open(path, "rb") as f:
        return f.read()


def write_bytes(path: str, data: bytes) -> None:
    """Write data to path, replacing any existing file."""
    with open(path, "wb") as f:
        f.write(data)


async def read_bytes_async(path: str) -> bytes:
    """Read a file without blocking the event loop."""
    return await asyncio.to_thread(read_bytes, path)


async def make_dirs_async(path: str) -> None:
    """Create a directory tree; an existing directory is not an error."""
    if path:
        await asyncio.to_thread(os.makedirs, path, exist_ok=True)


async def write_bytes_async(path: str, data: bytes) -> None:
    """Write a file without blocking the event loop."""
    await asyncio.to_thread(write_bytes, path, data)


def clean_directory(
    path: Union[str, Path], cwd: Optional[Union[str, Path]] = None
) -> List[str]:
    """Delete a directory tree and return the paths that were removed.

    Args:
        path: Directory to delete
        cwd: Working directory used to resolve path (defaults to os.getcwd())

    Returns:
        Removed paths, deepest first; empty if path does not exist

    Raises:
        InvalidConfiguration: If path is the working directory or one of
            its parents
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    target = (base / path).resolve()
    resolved_cwd = base.resolve()

    if target == resolved_cwd or target in resolved_cwd.parents:
        raise InvalidConfiguration(
            f"Refusing to delete the working directory or its parent: {target}"
        )

    if not target.exists():
        return []

    if not target.is_dir():
        target.unlink()
        return [str(target)]

    removed = [str(p) for p in sorted(target.rglob("*"), reverse=True)]
    removed.append(str(target))
    shutil.rmtree(target)
    return removed
