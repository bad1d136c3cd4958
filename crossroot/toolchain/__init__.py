"""
Host toolchain checks and cross-compilation configuration.
"""

from crossroot.toolchain.environment import ToolchainEnvironment
from crossroot.toolchain.preflight import CheckResult, PreflightRunner, check
from crossroot.toolchain.config_generator import (
    BuildConfigArtifact,
    ConfigGenerator,
    build_artifact,
    generate,
    render,
)

__all__ = [
    "ToolchainEnvironment",
    "CheckResult",
    "PreflightRunner",
    "check",
    "BuildConfigArtifact",
    "ConfigGenerator",
    "build_artifact",
    "generate",
    "render",
]
