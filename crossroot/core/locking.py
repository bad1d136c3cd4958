"""
Concurrent access control for crossroot.

Removing, re-creating and symlinking inside a sysroot is not safe to run from
two processes against the same path. This module serializes invocations per
sysroot with a file lock placed next to (never inside) the sysroot, because
the builder wipes the sysroot directory itself.

Usage:
    from crossroot.core.locking import sysroot_lock

    with sysroot_lock(sysroot_path, timeout=60):
        builder.build(...)
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from filelock import FileLock, Timeout as LockTimeout

from crossroot.core.exceptions import SysrootLockTimeout

logger = logging.getLogger(__name__)


def lock_path_for(sysroot: Union[str, Path]) -> Path:
    """
    Get the lock file path guarding a sysroot.

    Args:
        sysroot: Sysroot directory

    Returns:
        Sibling path named '<sysroot>.lock'
    """
    sysroot = Path(sysroot).absolute()
    return sysroot.with_name(f"{sysroot.name}.lock")


@contextmanager
def sysroot_lock(sysroot: Union[str, Path], timeout: float = 60):
    """
    Acquire the lock for a sysroot path.

    Args:
        sysroot: Sysroot directory to guard
        timeout: Maximum wait time in seconds (default: 60)

    Yields:
        Path of the lock file

    Raises:
        SysrootLockTimeout: If lock can't be acquired within timeout

    Example:
        >>> with sysroot_lock(Path('.cross-sysroot')):
        ...     rebuild_sysroot()
    """
    path = lock_path_for(sysroot)
    path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(path, timeout=timeout)

    try:
        with lock:
            logger.debug(f"Acquired sysroot lock: {path}")
            yield path
            logger.debug(f"Released sysroot lock: {path}")
    except LockTimeout as e:
        logger.error(
            f"Could not acquire sysroot lock after {timeout}s. "
            "Another crossroot process may be using this sysroot."
        )
        raise SysrootLockTimeout(
            f"Could not acquire lock {path} after {timeout}s. "
            "Another crossroot process may be using this sysroot."
        ) from e
