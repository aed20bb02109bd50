#!/usr/bin/env python3
"""Tests for batch processing and buffer transforms."""

import asyncio
import os

import pytest

from minifyimg.core.constants import ErrorCode
from minifyimg.core.validators import InvalidConfiguration
from minifyimg.engine import batch as batch_module
from minifyimg.engine.batch import (
    BatchEngine,
    BatchError,
    build_options,
    run_batch,
    run_batch_sync,
    transform_buffer,
    transform_buffer_sync,
)
from minifyimg.engine.results import ProcessOptions

from conftest import make_image


def p(path):
    return path.replace("/", os.sep)


def to_webp(data):
    return make_image("WEBP")


class TestBuildOptions:
    """Tests for build_options."""

    def test_sources(self):
        """Test instances, mappings and overrides."""
        assert build_options() == ProcessOptions()
        assert build_options({"destination": "out"}).destination == "out"
        assert build_options(ProcessOptions(destination="a"), destination="b").destination == "b"

    def test_unknown_key(self):
        """Test misspelt options are rejected."""
        with pytest.raises(InvalidConfiguration):
            build_options({"dest": "out"})


class TestValidation:
    """Tests for up-front validation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("specs", ["src/images/**/*", None, 42, {"a": 1}])
    async def test_non_sequence_specs(self, specs, monkeypatch):
        """Test malformed inputs fail before touching the filesystem."""

        def forbidden(*args, **kwargs):
            raise AssertionError("filesystem accessed")

        monkeypatch.setattr(batch_module.PathMatcher, "expand", forbidden)
        monkeypatch.setattr("minifyimg.engine.processor.read_bytes_async", forbidden)

        with pytest.raises(InvalidConfiguration, match="Expected an `Array`"):
            await run_batch(specs, ProcessOptions(destination="out"))

    @pytest.mark.asyncio
    async def test_plugins_not_a_list(self, image_tree):
        """Test a non-list plugins option is rejected."""
        with pytest.raises(InvalidConfiguration, match="plugins"):
            await run_batch(["src/images/**/*"], {"plugins": bytes.upper})

    def test_structure_template_required(self, image_tree):
        """Test preserving structure needs a wildcard template."""
        with pytest.raises(InvalidConfiguration, match="wildcard"):
            BatchEngine(["src/images/logo.png"], destination="out", preserve_structure=True)

    @pytest.mark.asyncio
    async def test_literal_exclusion(self, image_tree, monkeypatch):
        """Test exclusions with glob expansion off fail before reading files."""

        def forbidden(*args, **kwargs):
            raise AssertionError("filesystem accessed")

        monkeypatch.setattr("minifyimg.engine.processor.read_bytes_async", forbidden)

        with pytest.raises(InvalidConfiguration, match="requires glob expansion"):
            await run_batch(["src/images/logo.png", "!src/images/raw/draft.png"], use_glob=False)

    def test_literal_paths_cannot_preserve_structure(self):
        """Test structure preservation needs glob expansion."""
        with pytest.raises(InvalidConfiguration, match="requires glob expansion"):
            BatchEngine(
                ["src/images/**/*"], destination="out", preserve_structure=True, use_glob=False
            )

    def test_template_is_first_positive_pattern(self):
        """Test leading negations are skipped when picking the template."""
        engine = BatchEngine(["!src/raw/**", "src/**/*"], destination="out", preserve_structure=True)
        assert engine.template == "src/**/*"


class TestRunBatch:
    """Tests for run_batch."""

    @pytest.mark.asyncio
    async def test_flatten(self, image_tree):
        """Test every file lands directly in the destination."""
        results = await run_batch(["src/images/**/*"], ProcessOptions(destination="out"))

        names = sorted(os.listdir(image_tree / "out"))
        assert names == ["dot.gif", "draft.png", "logo.png", "photo.jpg", "star.svg"]
        assert len(results) == 5
        assert all(r.written for r in results)

    @pytest.mark.asyncio
    async def test_results_in_discovery_order(self, image_tree):
        """Test results follow discovery order, not completion order."""

        async def slow_for_gif(data):
            if data.startswith(b"GIF"):
                await asyncio.sleep(0.05)
            return data

        results = await run_batch(["src/images/**/*"], plugins=[slow_for_gif])

        assert [r.source_path for r in results] == [
            p("src/images/icons/nested/dot.gif"),
            p("src/images/icons/star.svg"),
            p("src/images/logo.png"),
            p("src/images/photo.jpg"),
            p("src/images/raw/draft.png"),
        ]

    @pytest.mark.asyncio
    async def test_preserve_structure(self, image_tree):
        """Test the tree below the template prefix is mirrored."""
        await run_batch(
            ["src/images/**/*", "!src/images/raw/**"],
            ProcessOptions(destination="out", preserve_structure=True),
        )

        out = image_tree / "out"
        assert (out / "logo.png").is_file()
        assert (out / "icons" / "star.svg").is_file()
        assert (out / "icons" / "nested" / "dot.gif").is_file()
        assert not (out / "raw").exists()

    @pytest.mark.asyncio
    async def test_webp_extension(self, image_tree):
        """Test WebP output replaces the source extension."""
        results = await run_batch(
            ["src/images/*.png", "src/images/*.jpg"],
            ProcessOptions(destination="out", plugins=[to_webp]),
        )

        assert sorted(os.listdir(image_tree / "out")) == ["logo.webp", "photo.webp"]
        assert all(r.destination_path.endswith(".webp") for r in results)

    @pytest.mark.asyncio
    async def test_no_destination(self, image_tree):
        """Test transform-only runs write nothing."""
        before = sorted(str(path) for path in image_tree.rglob("*"))

        results = await run_batch(["src/images/**/*.png"], plugins=[bytes.upper])

        assert [r.destination_path for r in results] == [None, None]
        assert results[0].data == (image_tree / "src/images/logo.png").read_bytes().upper()
        assert sorted(str(path) for path in image_tree.rglob("*")) == before

    @pytest.mark.asyncio
    async def test_same_file_written_once(self, image_tree):
        """Test two spellings of one file produce a single task and result."""
        results = await run_batch(
            ["src/images/*.png", "./src/images/*.png"], ProcessOptions(destination="out")
        )

        assert [(r.source_path, r.destination_path) for r in results] == [
            (p("src/images/logo.png"), os.path.join("out", "logo.png"))
        ]

    @pytest.mark.asyncio
    async def test_brace_patterns(self, image_tree):
        """Test brace groups select several extensions."""
        results = await run_batch(["src/images/**/*.{svg,gif}"], destination="out")

        assert sorted(os.listdir(image_tree / "out")) == ["dot.gif", "star.svg"]
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_no_matches(self, image_tree):
        """Test a pattern matching nothing is an empty batch."""
        assert await run_batch(["src/images/**/*.bmp"], destination="out") == []
        assert not (image_tree / "out").exists()

    @pytest.mark.asyncio
    async def test_literal_paths(self, image_tree):
        """Test use_glob=False processes the given paths."""
        results = await run_batch(["src/images/logo.png"], use_glob=False)
        assert [r.source_path for r in results] == ["src/images/logo.png"]

    def test_sync_wrapper(self, image_tree):
        """Test the blocking wrapper runs its own loop."""
        results = run_batch_sync(["src/images/*.jpg"], destination="out")
        assert results[0].destination_path == os.path.join("out", "photo.jpg")


class TestFailFast:
    """Tests for batch failure handling."""

    @pytest.mark.asyncio
    async def test_failing_file_aborts_batch(self, image_tree):
        """Test one failure raises BatchError with the cause chained."""

        def reject_svg(data):
            if b"<svg" in data:
                raise ValueError("svg not supported")
            return data

        with pytest.raises(BatchError) as exc_info:
            await run_batch(["src/images/**/*"], destination="out", plugins=[reject_svg])

        error = exc_info.value
        assert isinstance(error.__cause__, ValueError)
        assert error.source_path == p("src/images/icons/star.svg")
        assert error.input_specs == ["src/images/**/*"]
        assert error.error_code == ErrorCode.TRANSFORM_FAILED
        message = str(error)
        assert message.startswith("Error occurred when handling file: src/images/**/*")
        assert "Source: " + p("src/images/icons/star.svg") in message
        assert "svg not supported" in message

    @pytest.mark.asyncio
    async def test_pending_tasks_are_cancelled(self, image_tree):
        """Test slow files are cancelled once a file fails."""
        finished = []

        async def slow_unless_svg(data):
            if b"<svg" in data:
                raise ValueError("boom")
            await asyncio.sleep(5)
            finished.append(data)
            return data

        with pytest.raises(BatchError):
            await asyncio.wait_for(
                run_batch(["src/images/**/*"], plugins=[slow_unless_svg]), timeout=2
            )

        assert finished == []

    @pytest.mark.asyncio
    async def test_read_error_code(self, image_tree):
        """Test a missing literal path maps to NOT_FOUND."""
        with pytest.raises(BatchError) as exc_info:
            await run_batch(["src/images/missing.png"], use_glob=False)

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND


class TestTransformBuffer:
    """Tests for transform_buffer."""

    @pytest.mark.asyncio
    async def test_identity(self, png_bytes):
        """Test no plugins returns the buffer itself."""
        assert await transform_buffer(png_bytes) is png_bytes
        assert await transform_buffer(png_bytes, []) is png_bytes

    @pytest.mark.asyncio
    async def test_chain(self):
        """Test plugins are applied in order."""
        result = await transform_buffer(b"ab", [bytes.upper, lambda data: data + b"!"])
        assert result == b"AB!"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ["text", None, 12, [1, 2]])
    async def test_non_buffer(self, data):
        """Test non-buffer input is rejected."""
        with pytest.raises(InvalidConfiguration, match="Expected a `Buffer`"):
            await transform_buffer(data)

    def test_sync_wrapper(self):
        """Test the blocking wrapper."""
        assert transform_buffer_sync(b"ab", [bytes.upper]) == b"AB"

    @pytest.mark.asyncio
    async def test_options_object(self):
        """Test plugins may be passed inside ProcessOptions or a mapping."""
        assert await transform_buffer(b"ab", ProcessOptions(plugins=[bytes.upper])) == b"AB"
        assert await transform_buffer(b"ab", {"plugins": [bytes.upper]}) == b"AB"
        assert await transform_buffer(b"ab", {}) == b"ab"

    @pytest.mark.asyncio
    async def test_options_other_keys_rejected(self):
        """Test file options are rejected for buffers."""
        with pytest.raises(InvalidConfiguration, match="Only `plugins` applies"):
            await transform_buffer(b"ab", {"plugins": [], "destination": "out"})
