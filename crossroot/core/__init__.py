"""
Core functionality for crossroot.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    CrossrootError,
    ConfigError,
    UnsupportedTargetError,
    ContainerError,
    EngineUnavailable,
    ContainerStartFailure,
    ContainerNameConflict,
    PackageInstallFailure,
    CopyFailure,
    FilesystemError,
    SymlinkAlreadyExists,
    SysrootLockTimeout,
    SysrootError,
    MissingSysroot,
    IncompleteSysroot,
    PreflightError,
    MissingToolchainTarget,
    MissingCrossLinker,
    ArtifactRenderError,
)

from .locking import sysroot_lock

__all__ = [
    "CrossrootError",
    "ConfigError",
    "UnsupportedTargetError",
    "ContainerError",
    "EngineUnavailable",
    "ContainerStartFailure",
    "ContainerNameConflict",
    "PackageInstallFailure",
    "CopyFailure",
    "FilesystemError",
    "SymlinkAlreadyExists",
    "SysrootLockTimeout",
    "SysrootError",
    "MissingSysroot",
    "IncompleteSysroot",
    "PreflightError",
    "MissingToolchainTarget",
    "MissingCrossLinker",
    "ArtifactRenderError",
    "sysroot_lock",
]
