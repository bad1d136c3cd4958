"""
File system utilities for crossroot.

This module provides the small set of file operations the sysroot tooling
relies on:
- Atomic writes for generated configuration files
- Guarded directory removal that refuses to leave a given prefix
- Symlink creation that never replaces an existing path
- Executable lookup on PATH
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from crossroot.core.exceptions import FilesystemError, SymlinkAlreadyExists

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent (or equal to it)

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
        >>> is_relative_to(Path('/a/b'), Path('/c'))
        False
    """
    try:
        Path(path).resolve().relative_to(Path(parent).resolve())
        return True
    except ValueError:
        return False


def find_executable(
    name: str, search_paths: Optional[list[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'docker', 'x86_64-linux-gnu-gcc')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('docker')
        PosixPath('/usr/bin/docker')
    """
    extensions = [""] if not IS_WINDOWS else ["", ".exe", ".bat", ".cmd"]

    if search_paths is None:
        path_env = os.environ.get("PATH", "")
        search_paths = [Path(p) for p in path_env.split(os.pathsep) if p]

    for directory in search_paths:
        for ext in extensions:
            exe_path = directory / f"{name}{ext}"
            if exe_path.is_file() and os.access(exe_path, os.X_OK):
                return exe_path

    return None


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# Links
# ============================================================================


def create_symlink(link_path: Union[str, Path], target: Union[str, Path]) -> Path:
    """
    Create a symbolic link at link_path pointing to target.

    An existing file, directory or link at link_path is never replaced.

    Args:
        link_path: Location of the new link
        target: Link target (kept verbatim, so relative targets stay relative)

    Returns:
        The created link path

    Raises:
        SymlinkAlreadyExists: If anything already exists at link_path
        FilesystemError: If the link cannot be created for another reason
    """
    link_path = Path(link_path)

    if link_path.exists() or link_path.is_symlink():
        raise SymlinkAlreadyExists(link_path)

    try:
        os.symlink(str(target), str(link_path), target_is_directory=True)
    except FileExistsError:
        raise SymlinkAlreadyExists(link_path)
    except OSError as e:
        raise FilesystemError(f"Failed to create symlink {link_path} -> {target}: {e}")

    return link_path


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('.cargo/config.toml', '[build]\\n')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding, newline="\n") as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except (OSError, PermissionError):
            pass
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Symlinks inside the tree are removed, never followed.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/work/.cross-sysroot', require_prefix='/work')
        >>> safe_rmtree('/usr/lib', require_prefix='/work')  # ValueError
    """
    path = Path(os.path.abspath(path))

    if require_prefix is not None:
        require_prefix = Path(os.path.abspath(require_prefix))
        if not (path == require_prefix or require_prefix in path.parents):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if path.is_symlink():
        raise FilesystemError(f"Refusing to delete through a symlink: {path}")

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}")
