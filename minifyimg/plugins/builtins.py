#!/usr/bin/env python3
"""Built-in image minification transforms.

This module provides the plugins shipped with minifyimg:
- PNG optimisation, optionally palette-quantised (pngquant-like)
- JPEG optimisation keeping the source quantisation (jpegtran-like)
- GIF optimisation, animated GIFs included (gifsicle-like)
- SVG markup cleanup (svgo-like)
- WebP re-encoding of any raster input

Every transform returns its input unchanged when the content is not a
format it handles, so one chain can run over a mixed set of files.
Raster encoding runs in a worker thread.

Example:
    >>> png = PngTransform(colors=128)
    >>> smaller = await png(open("logo.png", "rb").read())
"""

import asyncio
import io
import re
from abc import abstractmethod
from typing import FrozenSet, Optional

from PIL import Image, UnidentifiedImageError

from minifyimg.core.filetype import detect_format
from minifyimg.transforms.base import Transform, TransformError

RASTER_FORMATS = frozenset({"png", "jpg", "gif", "bmp", "tif", "webp"})


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


class ImageTransform(Transform):
    """Base for transforms that decode and re-encode raster images.

    Subclasses set ``formats`` and implement encode().
    """

    formats: FrozenSet[str] = frozenset()

    def __init__(self, name: Optional[str] = None, keep_smaller: bool = True):
        """Initialize image transform.

        Args:
            name: Transform name
            keep_smaller: Return the input when re-encoding does not shrink it
        """
        super().__init__(name=name)
        self.keep_smaller = keep_smaller

    def supports(self, content: bytes) -> bool:
        """Check whether content is in one of the handled formats."""
        return detect_format(content).extension in self.formats

    async def transform(self, content: bytes) -> bytes:
        if not self.supports(content):
            return content

        try:
            output = await asyncio.to_thread(self._encode, content)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise TransformError(f"{self.name}: cannot encode image: {e}", self.name) from e

        if self.keep_smaller and len(output) >= len(content):
            return content
        return output

    def _encode(self, content: bytes) -> bytes:
        with Image.open(io.BytesIO(content)) as image:
            image.load()
            out = io.BytesIO()
            self.encode(image, out)
            return out.getvalue()

    @abstractmethod
    def encode(self, image: Image.Image, out: io.BytesIO) -> None:
        """Write image into out."""


class PngTransform(ImageTransform):
    """Lossless PNG optimisation, or lossy palette quantisation when colors is set."""

    formats = frozenset({"png"})

    def __init__(self, name: str = "png", colors: Optional[int] = None, **kwargs):
        super().__init__(name=name, **kwargs)
        if colors is not None and not 2 <= colors <= 256:
            raise TransformError(f"Invalid colors: {colors}. Must be between 2 and 256", name)
        self.colors = colors

    def encode(self, image: Image.Image, out: io.BytesIO) -> None:
        if self.colors:
            if _has_alpha(image):
                image = image.convert("RGBA").quantize(
                    colors=self.colors, method=Image.Quantize.FASTOCTREE
                )
            else:
                image = image.convert("RGB").quantize(
                    colors=self.colors, method=Image.Quantize.MEDIANCUT
                )
        image.save(out, format="PNG", optimize=True)


class JpegTransform(ImageTransform):
    """JPEG optimisation.

    With ``quality=None`` the source quantisation tables and subsampling are
    kept, so only the entropy coding changes.
    """

    formats = frozenset({"jpg"})

    def __init__(
        self,
        name: str = "jpeg",
        quality: Optional[int] = None,
        progressive: bool = True,
        **kwargs,
    ):
        super().__init__(name=name, **kwargs)
        if quality is not None and not 1 <= quality <= 95:
            raise TransformError(f"Invalid quality: {quality}. Must be between 1 and 95", name)
        self.quality = quality
        self.progressive = progressive

    def encode(self, image: Image.Image, out: io.BytesIO) -> None:
        params = {"optimize": True, "progressive": self.progressive}
        if self.quality is None:
            params.update(quality="keep", subsampling="keep")
        else:
            params["quality"] = self.quality
        icc_profile = image.info.get("icc_profile")
        if icc_profile:
            params["icc_profile"] = icc_profile
        image.save(out, format="JPEG", **params)


class GifTransform(ImageTransform):
    """GIF optimisation, keeping every frame of animated GIFs."""

    formats = frozenset({"gif"})

    def __init__(self, name: str = "gif", **kwargs):
        super().__init__(name=name, **kwargs)

    def encode(self, image: Image.Image, out: io.BytesIO) -> None:
        params = {"optimize": True}
        if getattr(image, "is_animated", False):
            params["save_all"] = True
            if "loop" in image.info:
                params["loop"] = image.info["loop"]
        image.save(out, format="GIF", **params)


class WebpTransform(ImageTransform):
    """Re-encode raster images as WebP.

    The output is always WebP, so files written by the engine get a .webp
    extension.
    """

    formats = RASTER_FORMATS - {"webp"}

    def __init__(
        self,
        name: str = "webp",
        quality: int = 80,
        lossless: bool = False,
        **kwargs,
    ):
        kwargs.setdefault("keep_smaller", False)
        super().__init__(name=name, **kwargs)
        if not 0 <= quality <= 100:
            raise TransformError(f"Invalid quality: {quality}. Must be between 0 and 100", name)
        self.quality = quality
        self.lossless = lossless

    def encode(self, image: Image.Image, out: io.BytesIO) -> None:
        params = {"quality": self.quality, "lossless": self.lossless, "method": 4}
        if getattr(image, "is_animated", False):
            params["save_all"] = True
        elif image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if _has_alpha(image) else "RGB")
        image.save(out, format="WEBP", **params)


class SvgTransform(Transform):
    """SVG markup cleanup.

    Removes comments, doctype, <metadata> blocks and whitespace-only text
    between tags. Whitespace is left alone in documents containing <text>.
    """

    _COMMENT = re.compile(rb"<!--.*?-->", re.DOTALL)
    _DOCTYPE = re.compile(rb"<!DOCTYPE[^>]*>", re.IGNORECASE)
    _METADATA = re.compile(rb"<metadata\b.*?</metadata>", re.DOTALL | re.IGNORECASE)
    _BETWEEN_TAGS = re.compile(rb">\s+<")

    def __init__(self, name: str = "svg"):
        super().__init__(name=name)

    async def transform(self, content: bytes) -> bytes:
        if detect_format(content).extension != "svg":
            return content

        output = self._COMMENT.sub(b"", content)
        output = self._DOCTYPE.sub(b"", output)
        output = self._METADATA.sub(b"", output)
        if b"<text" not in output:
            output = self._BETWEEN_TAGS.sub(b"><", output)
        return output.strip()
