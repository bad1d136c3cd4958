"""
Cross-compilation target platforms.

This module maps a Rust-style target triple onto everything the sysroot
tooling needs to know about it: the Debian multiarch directory libraries are
installed under, the container platform to emulate, and the conventional
name of the GNU cross-linker.
"""

from dataclasses import dataclass
from typing import Dict, List

from crossroot.core.exceptions import UnsupportedTargetError

DEFAULT_TRIPLE = "x86_64-unknown-linux-gnu"


@dataclass(frozen=True)
class TargetPlatform:
    """
    Cross-compilation target platform.

    Attributes:
        triple: Rust target triple (e.g., 'x86_64-unknown-linux-gnu')
        multiarch: Debian multiarch tuple used for library directories
            (e.g., 'x86_64-linux-gnu')
        container_platform: Platform string passed to the container engine
            (e.g., 'linux/amd64')
        linker_prefix: Prefix of the GNU cross-toolchain binaries
            (e.g., 'x86_64-linux-gnu-')
    """

    triple: str
    multiarch: str
    container_platform: str
    linker_prefix: str

    @property
    def linker(self) -> str:
        """Conventional name of the cross-linker driver."""
        return f"{self.linker_prefix}gcc"

    @property
    def cargo_env_prefix(self) -> str:
        """
        Prefix of Cargo's per-target environment variables.

        Example:
            >>> get_target('x86_64-unknown-linux-gnu').cargo_env_prefix
            'CARGO_TARGET_X86_64_UNKNOWN_LINUX_GNU'
        """
        return "CARGO_TARGET_" + self.triple.upper().replace("-", "_")

    @property
    def debian_gcc_package(self) -> str:
        """Debian/Ubuntu package that ships the cross-linker."""
        return "gcc-" + self.linker_prefix.rstrip("-").replace("_", "-")


_TARGETS: Dict[str, TargetPlatform] = {
    "x86_64-unknown-linux-gnu": TargetPlatform(
        triple="x86_64-unknown-linux-gnu",
        multiarch="x86_64-linux-gnu",
        container_platform="linux/amd64",
        linker_prefix="x86_64-linux-gnu-",
    ),
    "aarch64-unknown-linux-gnu": TargetPlatform(
        triple="aarch64-unknown-linux-gnu",
        multiarch="aarch64-linux-gnu",
        container_platform="linux/arm64",
        linker_prefix="aarch64-linux-gnu-",
    ),
    "armv7-unknown-linux-gnueabihf": TargetPlatform(
        triple="armv7-unknown-linux-gnueabihf",
        multiarch="arm-linux-gnueabihf",
        container_platform="linux/arm/v7",
        linker_prefix="arm-linux-gnueabihf-",
    ),
    "i686-unknown-linux-gnu": TargetPlatform(
        triple="i686-unknown-linux-gnu",
        multiarch="i386-linux-gnu",
        container_platform="linux/386",
        linker_prefix="i686-linux-gnu-",
    ),
}


def supported_triples() -> List[str]:
    """Return the supported target triples in sorted order."""
    return sorted(_TARGETS)


def get_target(triple: str) -> TargetPlatform:
    """
    Look up a target platform by triple.

    Args:
        triple: Rust target triple

    Returns:
        TargetPlatform for the triple

    Raises:
        UnsupportedTargetError: If the triple is not known

    Example:
        >>> target = get_target('aarch64-unknown-linux-gnu')
        >>> target.multiarch
        'aarch64-linux-gnu'
    """
    try:
        return _TARGETS[triple]
    except KeyError:
        raise UnsupportedTargetError(triple, supported_triples())
