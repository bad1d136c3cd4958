"""
Centralized exception hierarchy for crossroot.

This module defines all custom exceptions used across the codebase
so that callers can tell which resource failed without parsing messages.
"""

from typing import List, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class CrossrootError(Exception):
    """Base exception for all crossroot errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(CrossrootError):
    """Configuration parsing or validation error."""

    pass


class UnsupportedTargetError(CrossrootError, ValueError):
    """Raised when a platform triple has no known sysroot layout."""

    def __init__(self, triple: str, supported: Optional[List[str]] = None):
        self.triple = triple
        msg = f"Unsupported target triple: {triple}"
        if supported:
            msg += f". Supported targets: {', '.join(supported)}"
        super().__init__(msg)


# ============================================================================
# Container Exceptions
# ============================================================================


class ContainerError(CrossrootError):
    """Base exception for container engine errors."""

    pass


class EngineUnavailable(ContainerError):
    """Raised when the container engine cannot be reached."""

    def __init__(self, engine: str, reason: str = ""):
        self.engine = engine
        msg = f"Container engine '{engine}' is not available"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ContainerStartFailure(ContainerError):
    """Raised when a container cannot be started from an image."""

    def __init__(self, name: str, image: str, output: str = ""):
        self.name = name
        self.image = image
        self.output = output
        msg = f"Failed to start container '{name}' from image '{image}'"
        if output:
            msg += f": {output.strip()}"
        super().__init__(msg)


class ContainerNameConflict(ContainerStartFailure):
    """Raised when a container with the requested name already exists."""

    pass


class PackageInstallFailure(ContainerError):
    """Raised when a command inside the container exits non-zero."""

    def __init__(self, command: str, exit_code: int, output: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f"Command failed in container with exit code {exit_code}: {command}"
        )


class CopyFailure(ContainerError):
    """Raised when a required path cannot be copied out of the container."""

    def __init__(self, container_path: str, host_path: str, output: str = ""):
        self.container_path = container_path
        self.host_path = host_path
        self.output = output
        msg = f"Failed to copy required path {container_path} to {host_path}"
        if output:
            msg += f": {output.strip()}"
        super().__init__(msg)


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(CrossrootError):
    """Base exception for filesystem operations."""

    pass


class SymlinkAlreadyExists(FilesystemError):
    """Raised when a symlink would replace an existing path."""

    def __init__(self, link_path):
        self.link_path = link_path
        super().__init__(f"Path already exists, not creating symlink: {link_path}")


class SysrootLockTimeout(CrossrootError):
    """Raised when the per-sysroot lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Sysroot Exceptions
# ============================================================================


class SysrootError(CrossrootError):
    """Base exception for sysroot errors."""

    pass


class MissingSysroot(SysrootError):
    """Raised when the sysroot directory does not exist."""

    def __init__(self, sysroot):
        self.sysroot = sysroot
        super().__init__(f"Sysroot directory not found: {sysroot}")


class IncompleteSysroot(SysrootError):
    """Raised when a sysroot is missing checklist entries."""

    def __init__(self, sysroot, missing: list):
        self.sysroot = sysroot
        self.missing = list(missing)
        super().__init__(
            f"Sysroot {sysroot} is missing {len(self.missing)} file(s): "
            + ", ".join(str(entry.path) for entry in self.missing)
        )


# ============================================================================
# Preflight Exceptions
# ============================================================================


class PreflightError(CrossrootError):
    """Base exception for host toolchain problems."""

    pass


class MissingToolchainTarget(PreflightError):
    """The build target is not installed in the local toolchain."""

    def __init__(self, triple: str):
        self.triple = triple
        super().__init__(f"Rust target not installed: {triple}")


class MissingCrossLinker(PreflightError):
    """The cross-linker executable is not on PATH."""

    def __init__(self, linker: str):
        self.linker = linker
        super().__init__(f"{linker} not found!")


# ============================================================================
# Artifact Exceptions
# ============================================================================


class ArtifactRenderError(CrossrootError):
    """Raised when a rendered configuration does not match its model."""

    pass
