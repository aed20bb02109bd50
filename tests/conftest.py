"""Shared pytest fixtures for minifyimg tests."""
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator

import pytest
import yaml
from PIL import Image

from minifyimg.core.logging import Logger, set_global_logger

SVG_SOURCE = b"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">
<!-- Generator: hand written -->
<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">
    <metadata>
        <rdf>editor data</rdf>
    </metadata>
    <rect width="10" height="10" fill="red"/>
</svg>
"""


def make_image(fmt: str, size=(32, 32), mode: str = "RGB", color=(200, 30, 30)) -> bytes:
    """Encode a solid-colour image in the given Pillow format."""
    image = Image.new(mode, size, color)
    out = io.BytesIO()
    image.save(out, format=fmt)
    return out.getvalue()


def make_gradient_png(size=(64, 64)) -> bytes:
    """Encode an RGB gradient as an unoptimised PNG."""
    image = Image.new("RGB", size)
    image.putdata(
        [((x * 4) % 256, (y * 4) % 256, ((x + y) * 2) % 256) for y in range(size[1]) for x in range(size[0])]
    )
    out = io.BytesIO()
    image.save(out, format="PNG", compress_level=0)
    return out.getvalue()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def chdir_temp(temp_dir: Path) -> Generator[Path, None, None]:
    """Run the test with temp_dir as working directory."""
    previous = os.getcwd()
    os.chdir(temp_dir)
    try:
        yield temp_dir
    finally:
        os.chdir(previous)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image("JPEG")


@pytest.fixture
def gif_bytes() -> bytes:
    return make_image("GIF", mode="P", color=1)


@pytest.fixture
def svg_bytes() -> bytes:
    return SVG_SOURCE


@pytest.fixture
def image_tree(chdir_temp: Path) -> Path:
    """Create src/images with nested images and junk files, relative to cwd.

    Layout:
        src/images/logo.png
        src/images/photo.jpg
        src/images/icons/star.svg
        src/images/icons/nested/dot.gif
        src/images/.DS_Store
        src/images/icons/Thumbs.db
        src/images/raw/draft.png
    """
    images = chdir_temp / "src" / "images"
    (images / "icons" / "nested").mkdir(parents=True)
    (images / "raw").mkdir()

    (images / "logo.png").write_bytes(make_image("PNG"))
    (images / "photo.jpg").write_bytes(make_image("JPEG"))
    (images / "icons" / "star.svg").write_bytes(SVG_SOURCE)
    (images / "icons" / "nested" / "dot.gif").write_bytes(make_image("GIF", mode="P", color=1))
    (images / ".DS_Store").write_bytes(b"\x00\x00\x00\x01Bud1")
    (images / "icons" / "Thumbs.db").write_bytes(b"junk")
    (images / "raw" / "draft.png").write_bytes(make_image("PNG", color=(1, 2, 3)))

    return chdir_temp


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample project configuration."""
    return {
        "input_dir": ["src/images/**/*"],
        "out_dir": "dist/images",
        "use_webp": True,
        "deep_copy": False,
        "plugins": ["pngquant"],
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a YAML configuration file."""
    config_path = temp_dir / "minifyimg.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def quiet_logger():
    """Install a handler-less global logger so tests do not write to stderr."""
    logger = Logger("minifyimg", level="DEBUG", handlers=[logging.NullHandler()])
    set_global_logger(logger)
    yield logger
