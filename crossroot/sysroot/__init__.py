"""
Sysroot provisioning and verification.
"""

from crossroot.sysroot.packages import PackageSet
from crossroot.sysroot.builder import Sysroot, SysrootBuilder, SysrootBuildResult
from crossroot.sysroot.verifier import FileChecklist, VerificationReport, build_checklist, verify

__all__ = [
    "PackageSet",
    "Sysroot",
    "SysrootBuilder",
    "SysrootBuildResult",
    "FileChecklist",
    "VerificationReport",
    "build_checklist",
    "verify",
]
