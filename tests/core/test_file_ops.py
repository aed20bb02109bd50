"""Tests for file operations."""

import pytest

from minifyimg.core.file_ops import (
    clean_directory,
    make_dirs_async,
    read_bytes,
    read_bytes_async,
    write_bytes,
    write_bytes_async,
)
from minifyimg.core.validators import InvalidConfiguration


class TestReadWrite:
    """Tests for byte reads and writes."""

    def test_round_trip(self, temp_dir):
        """Test written bytes are read back unchanged."""
        path = str(temp_dir / "a.bin")
        write_bytes(path, b"\x00\x01\x02")
        assert read_bytes(path) == b"\x00\x01\x02"

    def test_write_replaces(self, temp_dir):
        """Test an existing file is overwritten."""
        path = temp_dir / "a.bin"
        path.write_bytes(b"old content")
        write_bytes(str(path), b"new")
        assert path.read_bytes() == b"new"

    def test_write_requires_parent(self, temp_dir):
        """Test write_bytes does not create directories."""
        with pytest.raises(FileNotFoundError):
            write_bytes(str(temp_dir / "missing" / "a.bin"), b"x")

    def test_read_missing(self, temp_dir):
        """Test reading a missing file raises."""
        with pytest.raises(FileNotFoundError):
            read_bytes(str(temp_dir / "missing.bin"))


class TestAsyncOperations:
    """Tests for the thread-offloaded variants."""

    @pytest.mark.asyncio
    async def test_make_dirs_and_write(self, temp_dir):
        """Test nested directories are created and reused."""
        target = temp_dir / "out" / "x"
        await make_dirs_async(str(target))
        await make_dirs_async(str(target))
        await write_bytes_async(str(target / "y.png"), b"data")

        assert await read_bytes_async(str(target / "y.png")) == b"data"

    @pytest.mark.asyncio
    async def test_make_dirs_empty_path(self):
        """Test an empty directory name is a no-op."""
        await make_dirs_async("")


class TestCleanDirectory:
    """Tests for clean_directory."""

    def test_removes_tree(self, temp_dir):
        """Test the tree is removed and listed deepest first."""
        out = temp_dir / "out"
        (out / "x").mkdir(parents=True)
        (out / "x" / "a.png").write_bytes(b"a")
        (out / "b.png").write_bytes(b"b")

        removed = clean_directory("out", cwd=temp_dir)

        assert not out.exists()
        assert removed[-1] == str(out.resolve())
        assert removed.index(str((out / "x" / "a.png").resolve())) < removed.index(
            str((out / "x").resolve())
        )
        assert len(removed) == 4

    def test_missing_directory(self, temp_dir):
        """Test a missing directory removes nothing."""
        assert clean_directory("nope", cwd=temp_dir) == []

    def test_single_file(self, temp_dir):
        """Test a file target is unlinked."""
        target = temp_dir / "out.png"
        target.write_bytes(b"x")

        assert clean_directory("out.png", cwd=temp_dir) == [str(target.resolve())]
        assert not target.exists()

    @pytest.mark.parametrize("path", [".", "..", ""])
    def test_refuses_working_directory(self, temp_dir, path):
        """Test the working directory and its parents are protected."""
        with pytest.raises(InvalidConfiguration):
            clean_directory(path, cwd=temp_dir)
        assert temp_dir.exists()
