"""
Unit tests for filesystem utilities.

Tests the file operations used for sysroots and generated configuration:
- Path utilities and executable lookup
- Symlink creation without replacement
- Atomic writes and guarded tree removal
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from crossroot.core.exceptions import FilesystemError, SymlinkAlreadyExists
from crossroot.core.filesystem import (
    IS_WINDOWS,
    atomic_write,
    create_symlink,
    ensure_directory,
    find_executable,
    is_relative_to,
    safe_rmtree,
)


# ============================================================================
# Path Utilities Tests
# ============================================================================


class TestPathUtilities:
    """Tests for path utility functions."""

    def test_is_relative_to_true(self, temp_dir):
        """Test is_relative_to with path under parent."""
        assert is_relative_to(temp_dir / "usr" / "lib", temp_dir)

    def test_is_relative_to_false(self, temp_dir):
        """Test is_relative_to with path not under parent."""
        assert not is_relative_to(Path("/completely/different/path"), temp_dir)

    def test_is_relative_to_dotdot_escape(self, temp_dir):
        """Test that '..' components cannot escape the parent."""
        assert not is_relative_to(temp_dir / "usr" / ".." / "..", temp_dir)

    def test_find_executable_nonexistent(self):
        """Test finding nonexistent executable."""
        assert find_executable("nonexistent_command_xyz123") is None

    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX permissions")
    def test_find_executable_custom_paths(self, temp_dir):
        """Test finding executable in custom search paths."""
        exe_path = temp_dir / "x86_64-linux-gnu-gcc"
        exe_path.write_text("#!/bin/sh\necho gcc")
        exe_path.chmod(0o755)

        assert find_executable("x86_64-linux-gnu-gcc", search_paths=[temp_dir]) == exe_path

    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX permissions")
    def test_find_executable_ignores_non_executable(self, temp_dir):
        """Test that plain files are not reported as executables."""
        (temp_dir / "docker").write_text("not a program")

        assert find_executable("docker", search_paths=[temp_dir]) is None

    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX permissions")
    def test_find_executable_uses_path(self, temp_dir):
        """Test lookup through the PATH environment variable."""
        exe_path = temp_dir / "rustup"
        exe_path.write_text("#!/bin/sh\n")
        exe_path.chmod(0o755)

        with patch.dict(os.environ, {"PATH": str(temp_dir)}):
            assert find_executable("rustup") == exe_path

    def test_ensure_directory(self, temp_dir):
        """Test that parents are created and repeated calls succeed."""
        path = temp_dir / "a" / "b"

        assert ensure_directory(path) == path
        assert ensure_directory(path) == path
        assert path.is_dir()


# ============================================================================
# Symlink Tests
# ============================================================================


@pytest.mark.skipif(IS_WINDOWS, reason="Symlinks need privileges on Windows")
class TestCreateSymlink:
    """Tests for create_symlink."""

    def test_relative_target_kept(self, temp_dir):
        """Test that a relative target is stored verbatim."""
        (temp_dir / "usr" / "lib" / "x86_64-linux-gnu").mkdir(parents=True)

        link = create_symlink(temp_dir / "lib64", Path("usr/lib/x86_64-linux-gnu"))

        assert link.is_symlink()
        assert os.readlink(link) == os.path.join("usr", "lib", "x86_64-linux-gnu")
        assert link.resolve() == (temp_dir / "usr/lib/x86_64-linux-gnu").resolve()

    def test_existing_directory(self, temp_dir):
        """Test that an existing directory is never replaced."""
        (temp_dir / "lib64").mkdir()

        with pytest.raises(SymlinkAlreadyExists) as exc_info:
            create_symlink(temp_dir / "lib64", Path("usr/lib"))

        assert exc_info.value.link_path == temp_dir / "lib64"
        assert not (temp_dir / "lib64").is_symlink()

    def test_existing_dangling_link(self, temp_dir):
        """Test that a dangling link also counts as existing."""
        (temp_dir / "lib64").symlink_to("nowhere")

        with pytest.raises(SymlinkAlreadyExists):
            create_symlink(temp_dir / "lib64", Path("usr/lib"))

    def test_missing_parent(self, temp_dir):
        """Test that other OS errors become FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            create_symlink(temp_dir / "no" / "such" / "lib64", Path("usr/lib"))

        assert not isinstance(exc_info.value, SymlinkAlreadyExists)


# ============================================================================
# Safe File Operations Tests
# ============================================================================


class TestSafeFileOperations:
    """Tests for safe file operations."""

    def test_atomic_write_text(self, temp_dir):
        """Test atomic write with text content."""
        file_path = temp_dir / "config.toml"

        atomic_write(file_path, "[build]\n")

        assert file_path.read_text() == "[build]\n"

    def test_atomic_write_creates_parent(self, temp_dir):
        """Test that parent directories are created."""
        file_path = temp_dir / ".cargo" / "config.toml"

        atomic_write(file_path, "content")

        assert file_path.read_text() == "content"

    def test_atomic_write_overwrites_existing(self, temp_dir):
        """Test that atomic write overwrites existing file."""
        file_path = temp_dir / "config.toml"
        file_path.write_text("old content")

        atomic_write(file_path, "new content")

        assert file_path.read_text() == "new content"

    def test_atomic_write_leaves_no_temp_files(self, temp_dir):
        """Test that only the target file remains."""
        atomic_write(temp_dir / "config.toml", "x")

        assert [p.name for p in temp_dir.iterdir()] == ["config.toml"]

    def test_atomic_write_failure_keeps_original(self, temp_dir):
        """Test that a failed write leaves the previous file untouched."""
        file_path = temp_dir / "config.toml"
        file_path.write_text("original")

        with patch.object(Path, "replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                atomic_write(file_path, "new")

        assert file_path.read_text() == "original"
        assert [p.name for p in temp_dir.iterdir()] == ["config.toml"]

    def test_safe_rmtree_removes_directory(self, temp_dir):
        """Test removing a directory tree."""
        tree = temp_dir / ".cross-sysroot"
        (tree / "usr" / "include").mkdir(parents=True)
        (tree / "usr" / "include" / "libudev.h").write_text("")

        safe_rmtree(tree, require_prefix=tree)

        assert not tree.exists()

    def test_safe_rmtree_nonexistent(self, temp_dir):
        """Test removing nonexistent directory (should not raise)."""
        safe_rmtree(temp_dir / "nonexistent")

    def test_safe_rmtree_with_prefix_invalid(self, temp_dir):
        """Test safe deletion rejects path outside prefix."""
        other_dir = Path(tempfile.gettempdir()) / "other"

        with pytest.raises(ValueError, match="not under required prefix"):
            safe_rmtree(other_dir, require_prefix=temp_dir)

    def test_safe_rmtree_not_a_directory(self, temp_dir):
        """Test that safe_rmtree rejects non-directories."""
        file_path = temp_dir / "file.txt"
        file_path.write_text("x")

        with pytest.raises(FilesystemError, match="not a directory"):
            safe_rmtree(file_path)

    @pytest.mark.skipif(IS_WINDOWS, reason="Symlinks need privileges on Windows")
    def test_safe_rmtree_refuses_symlink(self, temp_dir):
        """Test that a symlinked sysroot is not followed."""
        real = temp_dir / "real"
        real.mkdir()
        (real / "keep.txt").write_text("keep")
        link = temp_dir / "link"
        link.symlink_to(real)

        with pytest.raises(FilesystemError, match="symlink"):
            safe_rmtree(link)

        assert (real / "keep.txt").exists()
