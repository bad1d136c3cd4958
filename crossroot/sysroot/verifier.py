"""
Sysroot verification.

Checks a sysroot against a fixed checklist of files a cross build links
against. The checklist depends only on the target platform; the report is
recomputed from the filesystem on every call.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Tuple, Union

from crossroot.core.exceptions import IncompleteSysroot
from crossroot.cross.targets import TargetPlatform, get_target

logger = logging.getLogger(__name__)


class ChecklistGroup(Enum):
    """Checklist partitions."""

    CRITICAL = "critical"  # libraries, headers, pkg-config metadata
    STARTUP = "startup"  # C runtime objects needed for dynamic linking


@dataclass(frozen=True)
class ChecklistEntry:
    """One file a usable sysroot must contain, relative to the sysroot root."""

    name: str
    relative_path: PurePosixPath
    group: ChecklistGroup


@dataclass(frozen=True)
class FileChecklist:
    """Ordered checklist entries for one target platform."""

    triple: str
    entries: Tuple[ChecklistEntry, ...]

    @property
    def critical(self) -> List[ChecklistEntry]:
        return [e for e in self.entries if e.group is ChecklistGroup.CRITICAL]

    @property
    def startup(self) -> List[ChecklistEntry]:
        return [e for e in self.entries if e.group is ChecklistGroup.STARTUP]


@dataclass(frozen=True)
class EntryStatus:
    """Verification outcome for one checklist entry."""

    entry: ChecklistEntry
    path: Path
    found: bool


@dataclass(frozen=True)
class VerificationReport:
    """Found/missing status for every checklist entry of one sysroot."""

    sysroot: Path
    triple: str
    statuses: Tuple[EntryStatus, ...]

    @property
    def missing(self) -> List[EntryStatus]:
        return [s for s in self.statuses if not s.found]

    @property
    def found(self) -> List[EntryStatus]:
        return [s for s in self.statuses if s.found]

    @property
    def complete(self) -> bool:
        return not self.missing

    def group(self, group: ChecklistGroup) -> List[EntryStatus]:
        return [s for s in self.statuses if s.entry.group is group]

    def raise_for_missing(self) -> None:
        """
        Raise if any checklist entry is missing.

        Raises:
            IncompleteSysroot: Carrying the missing entries
        """
        if self.missing:
            raise IncompleteSysroot(self.sysroot, self.missing)


def build_checklist(target: Union[str, TargetPlatform]) -> FileChecklist:
    """
    Compute the checklist for a target platform.

    Args:
        target: Target triple or TargetPlatform

    Returns:
        FileChecklist with critical entries first, then startup objects
    """
    if isinstance(target, str):
        target = get_target(target)

    usr_lib = PurePosixPath("usr/lib") / target.multiarch
    lib = PurePosixPath("lib") / target.multiarch
    include = PurePosixPath("usr/include")

    critical = [
        ("libudev library", usr_lib / "libudev.so"),
        ("libudev pkg-config", usr_lib / "pkgconfig" / "libudev.pc"),
        ("libudev header", include / "libudev.h"),
        ("libssl library", usr_lib / "libssl.so"),
        ("openssl pkg-config", usr_lib / "pkgconfig" / "openssl.pc"),
        ("openssl header", include / "openssl" / "ssl.h"),
    ]
    startup = [
        ("Scrt1.o", usr_lib / "Scrt1.o"),
        ("crti.o", usr_lib / "crti.o"),
        ("crtn.o", usr_lib / "crtn.o"),
        ("libc.so.6", lib / "libc.so.6"),
    ]

    entries = [
        ChecklistEntry(name, path, ChecklistGroup.CRITICAL) for name, path in critical
    ] + [ChecklistEntry(name, path, ChecklistGroup.STARTUP) for name, path in startup]

    return FileChecklist(triple=target.triple, entries=tuple(entries))


def verify(sysroot: Union[str, Path], target: Union[str, TargetPlatform]) -> VerificationReport:
    """
    Verify a sysroot against the checklist for its target.

    Read-only: nothing under sysroot is created or modified.

    Args:
        sysroot: Sysroot root directory
        target: Target triple or TargetPlatform

    Returns:
        VerificationReport listing every entry with its absolute path
    """
    sysroot = Path(sysroot).absolute()
    checklist = build_checklist(target)

    statuses = []
    for entry in checklist.entries:
        path = sysroot.joinpath(*entry.relative_path.parts)
        found = path.exists()
        if found:
            logger.debug(f"Found: {path}")
        else:
            logger.debug(f"Missing: {path}")
        statuses.append(EntryStatus(entry=entry, path=path, found=found))

    return VerificationReport(
        sysroot=sysroot, triple=checklist.triple, statuses=tuple(statuses)
    )
