"""
Sysroot provisioning from an ephemeral container.

This module builds a local sysroot for a Linux target by installing packages
in a throwaway container of the target distribution, copying the library,
header and pkg-config trees out of it, and adding the lib64 compatibility
links GCC needs when a sysroot is set.
"""

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import FrozenSet, List, Optional, Tuple, Union

from crossroot.container.engine import ContainerEngine
from crossroot.container.session import (
    ContainerSession,
    Copied,
    CopyOutcome,
    OptionalCopyMissing,
    container_session,
)
from crossroot.core.exceptions import SymlinkAlreadyExists
from crossroot.core.filesystem import (
    create_symlink,
    ensure_directory,
    is_relative_to,
    safe_rmtree,
)
from crossroot.cross.targets import TargetPlatform, get_target
from crossroot.sysroot.packages import PackageSet
from crossroot.sysroot.verifier import VerificationReport, verify

logger = logging.getLogger(__name__)

# Always installed so the extracted tree carries pkg-config metadata dirs
BASE_PACKAGES = ("pkg-config",)


@dataclass(frozen=True)
class CopyStep:
    """A container path and the sysroot directory it is copied into."""

    container_path: str
    host_dir: PurePosixPath
    required: bool = True


@dataclass(frozen=True)
class Sysroot:
    """A populated sysroot tree."""

    path: Path
    triple: str
    populated: FrozenSet[PurePosixPath] = frozenset()


@dataclass
class SysrootBuildResult:
    """Outcome of one build, including the verification report."""

    sysroot: Sysroot
    report: VerificationReport
    copies: List[CopyOutcome] = field(default_factory=list)
    links_created: List[Path] = field(default_factory=list)
    links_skipped: List[Path] = field(default_factory=list)

    @property
    def missing_optional(self) -> List[OptionalCopyMissing]:
        return [c for c in self.copies if isinstance(c, OptionalCopyMissing)]


def skeleton_dirs(target: TargetPlatform) -> List[PurePosixPath]:
    """Directories that must exist before anything is copied into them."""
    return [
        PurePosixPath("usr/lib") / target.multiarch,
        PurePosixPath("usr/share"),
        PurePosixPath("lib"),
    ]


def copy_steps(target: TargetPlatform) -> List[CopyStep]:
    """
    Paths to copy out of the container, required ones first.

    Args:
        target: Target platform

    Returns:
        Ordered CopyStep list
    """
    ma = target.multiarch
    return [
        CopyStep(f"/usr/lib/{ma}", PurePosixPath("usr/lib")),
        CopyStep(f"/lib/{ma}", PurePosixPath("lib")),
        CopyStep("/usr/include", PurePosixPath("usr")),
        CopyStep("/lib64", PurePosixPath("."), required=False),
        CopyStep(
            f"/usr/lib/{ma}/pkgconfig",
            PurePosixPath("usr/lib") / ma,
            required=False,
        ),
        CopyStep("/usr/share/pkgconfig", PurePosixPath("usr/share"), required=False),
    ]


def compat_links(target: TargetPlatform) -> List[Tuple[PurePosixPath, PurePosixPath]]:
    """
    Compatibility symlinks as (link, relative target) pairs.

    GCC does not search lib/<multiarch> by default when --sysroot is set, so
    both lib64 locations point at the multiarch library directory. Targets are
    relative so the sysroot stays relocatable.
    """
    ma = target.multiarch
    return [
        (PurePosixPath("usr/lib64"), PurePosixPath("lib") / ma),
        (PurePosixPath("lib64"), PurePosixPath("usr/lib") / ma),
    ]


def create_compat_symlink(
    sysroot: Union[str, Path], link: PurePosixPath, target: PurePosixPath
) -> Path:
    """
    Create one compatibility symlink inside a sysroot.

    Missing parent directories inside the sysroot are created.

    Args:
        sysroot: Sysroot root directory
        link: Link location relative to sysroot
        target: Link target relative to the link's directory

    Returns:
        Absolute path of the created link

    Raises:
        SymlinkAlreadyExists: If something already exists at the link location
    """
    link_path = Path(sysroot).joinpath(*link.parts)
    if not is_relative_to(link_path.parent, Path(sysroot)):
        raise ValueError(f"Link escapes sysroot: {link_path}")
    ensure_directory(link_path.parent)
    return create_symlink(link_path, Path(*target.parts))


def link_compat_dirs(
    sysroot: Union[str, Path], target: Union[str, TargetPlatform]
) -> Tuple[List[Path], List[Path]]:
    """
    Create all compatibility symlinks, skipping links that already exist.

    Args:
        sysroot: Sysroot root directory
        target: Target triple or TargetPlatform

    Returns:
        (created, skipped) link paths
    """
    if isinstance(target, str):
        target = get_target(target)

    created, skipped = [], []
    for link, link_target in compat_links(target):
        try:
            created.append(create_compat_symlink(sysroot, link, link_target))
        except SymlinkAlreadyExists as e:
            logger.warning(f"Skipping symlink, path already exists: {e.link_path}")
            skipped.append(Path(e.link_path))
    return created, skipped


def install_command(packages: PackageSet) -> str:
    """
    Package-manager command installing the whole set in one invocation.

    Args:
        packages: Packages to install

    Returns:
        Shell command line for the container
    """
    names = " ".join(shlex.quote(name) for name in packages)
    return (
        "apt-get update && "
        f"DEBIAN_FRONTEND=noninteractive apt-get install -y {names}"
    )


class SysrootBuilder:
    """
    Build a sysroot from packages installed in a container.

    Example:
        >>> builder = SysrootBuilder(ContainerEngine("docker"), "ubuntu:24.04")
        >>> result = builder.build(Path(".cross-sysroot"),
        ...                        PackageSet(["libudev-dev"]),
        ...                        "x86_64-unknown-linux-gnu")
        >>> result.report.complete
        True
    """

    def __init__(
        self,
        engine: ContainerEngine,
        image: str,
        container_name: str = "sysroot-builder",
    ):
        """
        Initialize builder.

        Args:
            engine: Container engine adapter
            image: Base image reference pinned to a platform version (e.g., 'ubuntu:24.04')
            container_name: Name of the ephemeral build container
        """
        self.engine = engine
        self.image = image
        self.container_name = container_name

    def build(
        self,
        sysroot_path: Union[str, Path],
        packages: PackageSet,
        triple: Union[str, TargetPlatform],
        session: Optional[ContainerSession] = None,
    ) -> SysrootBuildResult:
        """
        Build a fresh sysroot.

        Any existing tree at sysroot_path is removed first. A symlink there is
        unlinked without touching what it points to. Missing checklist files
        do not fail the build; they are reported in the result.

        Args:
            sysroot_path: Sysroot directory to (re)create
            packages: Packages to install, in order
            triple: Target triple or TargetPlatform
            session: Optional pre-built session (the container is still
                started and removed by this call)

        Returns:
            SysrootBuildResult with the verification report

        Raises:
            EngineUnavailable: If the container engine cannot be reached
            ContainerStartFailure: If the build container cannot be started
            PackageInstallFailure: If package installation fails
            CopyFailure: If a required path cannot be copied
        """
        target = get_target(triple) if isinstance(triple, str) else triple
        sysroot = Path(sysroot_path).absolute()

        logger.info(f"Sysroot location: {sysroot}")
        logger.info(f"Packages to install: {' '.join(packages)}")

        self._reset_tree(sysroot, target)

        copies: List[CopyOutcome] = []
        with container_session(
            self.engine,
            self.image,
            self.container_name,
            platform=target.container_platform,
            session=session,
        ) as active:
            logger.info(f"Installing {' '.join(packages)} and dependencies in container...")
            active.exec(install_command(packages.with_prefix(*BASE_PACKAGES)))

            logger.info("Copying files from container to sysroot...")
            for step in copy_steps(target):
                host_dir = self._host_dir(sysroot, step.host_dir)
                copies.append(
                    active.copy_out(step.container_path, host_dir, required=step.required)
                )

            created, skipped = link_compat_dirs(sysroot, target)

        populated = {
            PurePosixPath(step.host_dir) / PurePosixPath(c.container_path).name
            for step, c in zip(copy_steps(target), copies)
            if isinstance(c, Copied)
        }
        populated.update(
            PurePosixPath(p.relative_to(sysroot).as_posix()) for p in created
        )

        logger.info("Verifying sysroot...")
        report = verify(sysroot, target)

        return SysrootBuildResult(
            sysroot=Sysroot(sysroot, target.triple, frozenset(populated)),
            report=report,
            copies=copies,
            links_created=created,
            links_skipped=skipped,
        )

    def _reset_tree(self, sysroot: Path, target: TargetPlatform) -> None:
        if sysroot == Path(sysroot.anchor):
            raise ValueError(f"Refusing to use filesystem root as sysroot: {sysroot}")

        if sysroot.is_symlink():
            # The link target is left untouched
            logger.warning(f"Replacing sysroot symlink {sysroot} with a directory")
            sysroot.unlink()
        elif sysroot.exists():
            logger.info("Removing old sysroot directory...")
            safe_rmtree(sysroot, require_prefix=sysroot)

        logger.info("Creating sysroot directory...")
        sysroot.mkdir(parents=True)
        for rel in skeleton_dirs(target):
            self._host_dir(sysroot, rel).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _host_dir(sysroot: Path, rel: PurePosixPath) -> Path:
        path = sysroot.joinpath(*rel.parts)
        if not is_relative_to(path, sysroot):
            raise ValueError(f"Path escapes sysroot: {path}")
        return path
