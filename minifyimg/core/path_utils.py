"""
minifyimg Core: Path utilities.

Destination paths for processed files. Everything here is pure string and
path arithmetic; nothing touches the filesystem.
"""
import os
from typing import Optional

from minifyimg.core.constants import WEBP_EXTENSION
from minifyimg.core.filetype import BinaryFormat
from minifyimg.core.validators import fixed_prefix


def normalize_path(path: str) -> str:
    """Normalize separators and drop redundant "./" and "x/.." segments."""
    return os.path.normpath(path.replace("\\", "/"))


def base_directory(template: str) -> str:
    """Return the directory part of a pattern's fixed prefix.

    "src/images/**/*" -> "src/images", "src/img*.png" -> "src", "*.png" -> ".".
    """
    prefix = fixed_prefix(template).replace("\\", "/")
    head, _, _ = prefix.rpartition("/")
    if not head and prefix.startswith("/"):
        return "/"
    return normalize_path(head) if head else "."


def relative_subpath(source_path: str, template: str) -> str:
    """Return the path of source_path below the template's fixed prefix."""
    base = base_directory(template)
    source = normalize_path(source_path)
    if os.path.isabs(source) != os.path.isabs(base):
        source = os.path.abspath(source)
        base = os.path.abspath(base)
    return os.path.relpath(source, base)


def replace_extension(path: str, extension: str) -> str:
    """Replace the extension of path ("a/b.png", "webp" -> "a/b.webp")."""
    root, _ = os.path.splitext(path)
    return f"{root}.{extension.lstrip('.')}"


def resolve_destination(
    source_path: str,
    destination: Optional[str],
    template: Optional[str],
    preserve_structure: bool,
    fmt: Optional[BinaryFormat] = None,
) -> Optional[str]:
    """Compute where a processed file is written.

    Args:
        source_path: Path the file was read from
        destination: Output root, or None for transform-only runs
        template: First input pattern, used when preserving structure
        preserve_structure: Mirror the sub-path below the template's prefix
            instead of writing every file directly into destination
        fmt: Detected format of the transformed content

    Returns:
        Destination path, or None when nothing should be written
    """
    if not destination:
        return None

    if preserve_structure and template:
        destination_path = os.path.join(destination, relative_subpath(source_path, template))
    else:
        destination_path = os.path.join(destination, os.path.basename(source_path))

    if fmt is not None and fmt.extension == WEBP_EXTENSION:
        destination_path = replace_extension(destination_path, WEBP_EXTENSION)

    return destination_path
