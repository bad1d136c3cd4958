"""
Cargo configuration generator.

This module derives the linker selection and flags for a cross build from a
sysroot, models them as a BuildConfigArtifact, and renders the artifact into
``.cargo/config.toml``. The rendered text is parsed back and compared with
the model before anything is written, so a malformed file never reaches disk.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import logging

import toml

from crossroot.core.exceptions import ArtifactRenderError
from crossroot.core.filesystem import atomic_write
from crossroot.cross.targets import TargetPlatform, get_target
from crossroot.toolchain.environment import SysrootLayout, ToolchainEnvironment

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path(".cargo") / "config.toml"


@dataclass(frozen=True)
class BuildConfigArtifact:
    """
    Everything written to the Cargo configuration.

    Attributes:
        target: Build target triple
        linker: Cross-linker override
        rustflags: Ordered flags passed to rustc for the target
        environment: Variables for the [env] table
        sysroot: Sysroot the artifact was derived from
        generated_at: Generation time, only used in the header comment
    """

    target: str
    linker: str
    rustflags: Tuple[str, ...]
    environment: ToolchainEnvironment
    sysroot: Path
    generated_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        """Structured form of the artifact, in rendering order."""
        return {
            "build": {"target": self.target},
            "target": {
                self.target: {
                    "linker": self.linker,
                    "rustflags": list(self.rustflags),
                }
            },
            "env": dict(self.environment),
        }

    def linker_env(self) -> Dict[str, str]:
        """Cargo per-target variables equivalent to the [target] table."""
        prefix = get_target(self.target).cargo_env_prefix
        return {
            f"{prefix}_LINKER": self.linker,
            f"{prefix}_RUSTFLAGS": " ".join(self.rustflags),
        }


def linker_flags(sysroot: Union[str, Path], target: TargetPlatform) -> Tuple[str, ...]:
    """
    Ordered rustc flags selecting the cross-linker and sysroot.

    The -rpath-link directories follow the -L directories they mirror, and
    --sysroot comes last.

    Args:
        sysroot: Sysroot root directory
        target: Target platform

    Returns:
        Flag tuple
    """
    layout = SysrootLayout(sysroot, target)
    return (
        "-C", f"linker={target.linker}",
        "-L", layout.usr_lib_arch,
        "-L", layout.lib_arch,
        "-C", f"link-arg=-Wl,-rpath-link,{layout.lib_arch}",
        "-C", f"link-arg=-Wl,-rpath-link,{layout.usr_lib_arch}",
        "-C", f"link-arg=--sysroot={layout.root}",
    )  # fmt: skip


def build_artifact(
    sysroot: Union[str, Path],
    triple: Union[str, TargetPlatform],
    generated_at: Optional[datetime] = None,
) -> BuildConfigArtifact:
    """
    Derive the artifact for a sysroot without touching the filesystem.

    Args:
        sysroot: Sysroot root directory
        triple: Target triple or TargetPlatform
        generated_at: Timestamp for the header (default: now)

    Returns:
        BuildConfigArtifact
    """
    target = get_target(triple) if isinstance(triple, str) else triple
    sysroot = Path(sysroot).absolute()
    return BuildConfigArtifact(
        target=target.triple,
        linker=target.linker,
        rustflags=linker_flags(sysroot, target),
        environment=ToolchainEnvironment.for_sysroot(sysroot, target),
        sysroot=sysroot,
        generated_at=generated_at or datetime.now(),
    )


def render(artifact: BuildConfigArtifact) -> str:
    """
    Render an artifact to TOML text.

    Args:
        artifact: Artifact to render

    Returns:
        TOML document with a generated-by header

    Raises:
        ArtifactRenderError: If the rendered text does not parse back to the
            artifact's structure
    """
    document = artifact.to_document()
    timestamp = (artifact.generated_at or datetime.now()).isoformat(timespec="seconds")

    header = [
        "# Auto-generated Cargo configuration for cross-compilation",
        f"# Generated by crossroot on {timestamp}",
        f"# Sysroot: {artifact.sysroot}",
        "",
    ]
    # One table at a time; toml.dumps alone would move [target.<triple>] last
    body = "\n".join(toml.dumps({key: value}) for key, value in document.items())
    text = "\n".join(header) + body

    try:
        parsed = toml.loads(text)
    except toml.TomlDecodeError as e:
        raise ArtifactRenderError(f"Rendered configuration is not valid TOML: {e}")

    if parsed != document:
        raise ArtifactRenderError(
            "Rendered configuration does not match the artifact model"
        )

    return text


class ConfigGenerator:
    """
    Generate and persist the Cargo configuration for a sysroot.

    Example:
        >>> generator = ConfigGenerator(Path.cwd())
        >>> artifact = generator.generate(Path(".cross-sysroot"), "x86_64-unknown-linux-gnu")
        >>> generator.output_path
        PosixPath('.../.cargo/config.toml')
    """

    def __init__(self, project_root: Path, output: Optional[Path] = None):
        """
        Initialize generator.

        Args:
            project_root: Directory the default output path is relative to
            output: Artifact path (default: <project_root>/.cargo/config.toml)
        """
        self.project_root = Path(project_root)
        output = Path(output) if output is not None else DEFAULT_OUTPUT
        self.output_path = output if output.is_absolute() else self.project_root / output

    def generate(
        self,
        sysroot: Union[str, Path],
        triple: Union[str, TargetPlatform],
        generated_at: Optional[datetime] = None,
    ) -> BuildConfigArtifact:
        """
        Build, render and write the artifact, replacing any previous file.

        Neither preflight nor sysroot completeness is checked here.

        Args:
            sysroot: Sysroot root directory
            triple: Target triple or TargetPlatform
            generated_at: Timestamp for the header (default: now)

        Returns:
            The written BuildConfigArtifact
        """
        artifact = build_artifact(sysroot, triple, generated_at)
        content = render(artifact)
        atomic_write(self.output_path, content)

        logger.info(f"Created {self.output_path}")
        return artifact


def generate(
    sysroot: Union[str, Path],
    triple: Union[str, TargetPlatform],
    project_root: Optional[Path] = None,
    output: Optional[Path] = None,
) -> BuildConfigArtifact:
    """Generate the configuration under project_root (default: cwd)."""
    return ConfigGenerator(project_root or Path.cwd(), output).generate(sysroot, triple)
