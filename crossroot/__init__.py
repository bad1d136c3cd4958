"""
crossroot - Linux sysroots and Cargo cross-compilation configuration.

Builds a sysroot of target-platform libraries and headers from packages
installed in an ephemeral container, and derives the linker, flags and
environment a Cargo cross build needs to link against it.
"""

from crossroot.sysroot.builder import SysrootBuilder, SysrootBuildResult
from crossroot.sysroot.packages import PackageSet
from crossroot.sysroot.verifier import verify
from crossroot.toolchain.config_generator import ConfigGenerator, generate
from crossroot.toolchain.preflight import check

__all__ = [
    "SysrootBuilder",
    "SysrootBuildResult",
    "PackageSet",
    "verify",
    "ConfigGenerator",
    "generate",
    "check",
]
