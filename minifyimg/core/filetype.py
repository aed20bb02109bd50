"""Content-based format detection.

The format of a buffer is read from its leading bytes, never from a file
name: a transform may turn a PNG into WebP while the source is still
called ``logo.png``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class BinaryFormat:
    extension: str
    mime: str

    @property
    def is_unknown(self) -> bool:
        return not self.extension


UNKNOWN_FORMAT = BinaryFormat("", "application/octet-stream")

PNG = BinaryFormat("png", "image/png")
JPEG = BinaryFormat("jpg", "image/jpeg")
GIF = BinaryFormat("gif", "image/gif")
WEBP = BinaryFormat("webp", "image/webp")
BMP = BinaryFormat("bmp", "image/bmp")
TIFF = BinaryFormat("tif", "image/tiff")
ICO = BinaryFormat("ico", "image/x-icon")
AVIF = BinaryFormat("avif", "image/avif")
HEIC = BinaryFormat("heic", "image/heic")
SVG = BinaryFormat("svg", "image/svg+xml")
PDF = BinaryFormat("pdf", "application/pdf")
ZIP = BinaryFormat("zip", "application/zip")
GZIP = BinaryFormat("gz", "application/gzip")

# (offset, signature, format), checked in order
MAGIC_NUMBERS: tuple[tuple[int, bytes, BinaryFormat], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", PNG),
    (0, b"\xff\xd8\xff", JPEG),
    (0, b"GIF87a", GIF),
    (0, b"GIF89a", GIF),
    (0, b"BM", BMP),
    (0, b"II*\x00", TIFF),
    (0, b"MM\x00*", TIFF),
    (0, b"\x00\x00\x01\x00", ICO),
    (0, b"%PDF", PDF),
    (0, b"PK\x03\x04", ZIP),
    (0, b"\x1f\x8b", GZIP),
)

ISOBMFF_BRANDS: dict[bytes, BinaryFormat] = {
    b"avif": AVIF,
    b"avis": AVIF,
    b"heic": HEIC,
    b"heix": HEIC,
    b"mif1": HEIC,
}

_SVG_ROOT = re.compile(rb"<svg[\s>]", re.IGNORECASE)
_TEXT_SAMPLE = 4096


def _detect_riff(data: bytes) -> BinaryFormat | None:
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return WEBP
    return None


def _detect_isobmff(data: bytes) -> BinaryFormat | None:
    if data[4:8] != b"ftyp":
        return None
    return ISOBMFF_BRANDS.get(data[8:12])


def _detect_svg(data: bytes) -> BinaryFormat | None:
    sample = data[:_TEXT_SAMPLE].lstrip(b"\xef\xbb\xbf \t\r\n")
    if not sample.startswith(b"<"):
        return None
    if _SVG_ROOT.search(sample):
        return SVG
    return None


def detect_format(data: bytes | bytearray | memoryview) -> BinaryFormat:
    """Infer the binary format of data.

    Returns UNKNOWN_FORMAT instead of raising when nothing matches.
    """
    head = bytes(data[:_TEXT_SAMPLE])

    riff = _detect_riff(head)
    if riff is not None:
        return riff

    for offset, signature, fmt in MAGIC_NUMBERS:
        if head[offset : offset + len(signature)] == signature:
            return fmt

    for detector in (_detect_isobmff, _detect_svg):
        fmt = detector(head)
        if fmt is not None:
            return fmt

    return UNKNOWN_FORMAT
