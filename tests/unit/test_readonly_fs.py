"""
Tests for the ReadOnlyFS disk adapter.

These tests verify that the adapter never modifies the source, reads
within its budget, and reports failures with the right exception types.
"""

import pytest
import tempfile
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vaultgraph_core.adapters.readonly_fs import ReadOnlyFS
from vaultgraph_core.ports.fs_port import ReadBudget


class TestReadOnlyFSSafety:
    """Mutating operations are refused."""

    @pytest.mark.parametrize("operation", ["write", "delete", "rename", "mkdir"])
    def test_mutation_refused(self, operation):
        fs = ReadOnlyFS()
        with pytest.raises(NotImplementedError, match="never modifies"):
            getattr(fs, operation)("path")


class TestReadOnlyFSReadOperations:
    """Test that read operations work correctly."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory with test files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "note.md").write_text("See [[other]]")

            sub_dir = Path(tmpdir) / "subdir"
            sub_dir.mkdir()
            (sub_dir / "other.md").write_text("Nested content")

            yield Path(tmpdir)

    def test_exists(self, temp_dir):
        fs = ReadOnlyFS()
        assert fs.exists(temp_dir)
        assert fs.exists(temp_dir / "note.md")
        assert not fs.exists(temp_dir / "nonexistent.md")

    def test_is_dir(self, temp_dir):
        fs = ReadOnlyFS()
        assert fs.is_dir(temp_dir)
        assert fs.is_dir(temp_dir / "subdir")
        assert not fs.is_dir(temp_dir / "note.md")

    def test_scandir(self, temp_dir):
        """Test scandir() returns directory entries with kinds and sizes."""
        fs = ReadOnlyFS()
        entries = {e.name: e for e in fs.scandir(temp_dir)}

        assert set(entries) == {"note.md", "subdir"}
        assert entries["note.md"].is_file
        assert entries["note.md"].size_bytes == len("See [[other]]")
        assert entries["subdir"].is_dir
        assert all(e.readable for e in entries.values())

    def test_scandir_missing_raises_not_found(self, temp_dir):
        fs = ReadOnlyFS()
        with pytest.raises(FileNotFoundError):
            list(fs.scandir(temp_dir / "missing"))

    def test_scandir_file_raises_not_a_directory(self, temp_dir):
        fs = ReadOnlyFS()
        with pytest.raises(NotADirectoryError):
            list(fs.scandir(temp_dir / "note.md"))

    def test_read_text(self, temp_dir):
        fs = ReadOnlyFS()
        assert fs.read_text(temp_dir / "note.md") == "See [[other]]"

    def test_read_with_budget(self, temp_dir):
        """Test read operations respect budget limits."""
        fs = ReadOnlyFS()

        large_file = temp_dir / "large.md"
        large_file.write_text("X" * 10000)

        assert len(fs.read_bytes(large_file, ReadBudget(max_bytes=100))) == 100
        assert len(fs.read_bytes(large_file, ReadBudget(max_bytes=None))) == 10000

    def test_read_directory_fails(self, temp_dir):
        fs = ReadOnlyFS()
        with pytest.raises(FileNotFoundError):
            fs.read_bytes(temp_dir / "subdir")

    def test_stat(self, temp_dir):
        fs = ReadOnlyFS()
        entry = fs.stat(temp_dir / "note.md")

        assert entry.name == "note.md"
        assert entry.size_bytes == 13
        assert entry.is_file
        assert not entry.is_dir

    def test_read_stats(self, temp_dir):
        fs = ReadOnlyFS()
        fs.read_bytes(temp_dir / "note.md")
        assert fs.stats == {"read_count": 1, "bytes_read": 13}


class TestReadOnlyFSAllowedRoots:
    """Test path validation with allowed roots."""

    @pytest.fixture
    def temp_dirs(self):
        """Create two temporary directories."""
        with tempfile.TemporaryDirectory() as allowed, \
             tempfile.TemporaryDirectory() as forbidden:

            (Path(allowed) / "allowed.md").write_text("allowed")
            (Path(forbidden) / "forbidden.md").write_text("forbidden")

            yield Path(allowed), Path(forbidden)

    def test_allowed_root_access(self, temp_dirs):
        allowed, _ = temp_dirs
        fs = ReadOnlyFS(allowed_roots=[allowed])

        assert fs.exists(allowed / "allowed.md")
        assert fs.read_text(allowed / "allowed.md") == "allowed"

    def test_forbidden_root_blocked(self, temp_dirs):
        """Access outside the allowed roots is a permission error."""
        allowed, forbidden = temp_dirs
        fs = ReadOnlyFS(allowed_roots=[allowed])

        assert not fs.exists(forbidden / "forbidden.md")
        with pytest.raises(PermissionError, match="not under any allowed root"):
            fs.read_bytes(forbidden / "forbidden.md")
        with pytest.raises(PermissionError):
            list(fs.scandir(forbidden))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
