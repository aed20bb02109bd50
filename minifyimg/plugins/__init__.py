"""minifyimg Plugins.

- PluginRegistry: name -> transform factory lookup
- Built-in Pillow-based transforms for PNG, JPEG, GIF, SVG and WebP
"""

from .builtins import (
    GifTransform,
    ImageTransform,
    JpegTransform,
    PngTransform,
    SvgTransform,
    WebpTransform,
)
from .registry import PluginError, PluginRegistry, get_default_registry, register_builtins

__all__ = [
    # Registry
    "PluginError",
    "PluginRegistry",
    "get_default_registry",
    "register_builtins",
    # Built-in transforms
    "ImageTransform",
    "PngTransform",
    "JpegTransform",
    "GifTransform",
    "SvgTransform",
    "WebpTransform",
]
