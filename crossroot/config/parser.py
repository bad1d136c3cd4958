"""YAML configuration parser for crossroot.

This module provides parsing and validation for crossroot.yaml configuration
files. The file is optional; every key has a default matching a stock
Ubuntu-based x86_64 sysroot with libudev and OpenSSL.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import logging

import yaml

from crossroot.core.exceptions import ConfigError, UnsupportedTargetError
from crossroot.cross.targets import DEFAULT_TRIPLE, get_target

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "crossroot.yaml"

SUPPORTED_ENGINES = ["docker", "podman"]

DEFAULT_PACKAGES = ["libudev-dev", "libssl-dev", "libc6-dev"]


@dataclass
class ImageConfig:
    """Base image the sysroot is extracted from."""

    name: str = "ubuntu"
    version: str = "24.04"  # pinned platform-version tag

    @property
    def reference(self) -> str:
        return f"{self.name}:{self.version}"


@dataclass
class CrossrootConfig:
    """Complete crossroot configuration."""

    target: str = DEFAULT_TRIPLE
    sysroot: Path = Path(".cross-sysroot")
    engine: str = "docker"
    container_name: str = "sysroot-builder"
    image: ImageConfig = field(default_factory=ImageConfig)
    packages: List[str] = field(default_factory=lambda: list(DEFAULT_PACKAGES))
    output: Path = Path(".cargo") / "config.toml"

    def resolve_paths(self, project_root: Path) -> "CrossrootConfig":
        """
        Make relative sysroot and output paths absolute against project_root.

        Args:
            project_root: Directory relative paths are interpreted against

        Returns:
            self, for chaining
        """
        project_root = Path(project_root).absolute()
        if not self.sysroot.is_absolute():
            self.sysroot = project_root / self.sysroot
        if not self.output.is_absolute():
            self.output = project_root / self.output
        return self


def parse_config(config_path: Path) -> CrossrootConfig:
    """
    Parse crossroot.yaml configuration file.

    Args:
        config_path: Path to crossroot.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        logger.debug(f"Configuration file is empty, using defaults: {config_path}")
        return CrossrootConfig()

    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    return _parse_and_validate(data)


def load_config(
    project_root: Path, config_file: Optional[Path] = None
) -> CrossrootConfig:
    """
    Load configuration for a project, falling back to defaults.

    Args:
        project_root: Project root directory
        config_file: Explicit configuration file (must exist if given)

    Returns:
        Configuration with paths resolved against project_root
    """
    if config_file is not None:
        config = parse_config(Path(config_file))
    else:
        default_config = Path(project_root) / CONFIG_FILENAME
        if default_config.exists():
            config = parse_config(default_config)
        else:
            logger.debug(f"Config file not found (optional): {default_config}")
            config = CrossrootConfig()

    return config.resolve_paths(project_root)


def _parse_and_validate(data: dict) -> CrossrootConfig:
    """Parse and validate configuration data."""
    config = CrossrootConfig()

    if "target" in data:
        target = data["target"]
        if not isinstance(target, str):
            raise ConfigError("'target' must be a string")
        try:
            get_target(target)
        except UnsupportedTargetError as e:
            raise ConfigError(str(e))
        config.target = target

    if "sysroot" in data:
        if not isinstance(data["sysroot"], str) or not data["sysroot"]:
            raise ConfigError("'sysroot' must be a non-empty path string")
        config.sysroot = Path(data["sysroot"])

    if "output" in data:
        if not isinstance(data["output"], str) or not data["output"]:
            raise ConfigError("'output' must be a non-empty path string")
        config.output = Path(data["output"])

    if "engine" in data:
        if data["engine"] not in SUPPORTED_ENGINES:
            raise ConfigError(
                f"Invalid engine '{data['engine']}'. "
                f"Must be one of: {', '.join(SUPPORTED_ENGINES)}"
            )
        config.engine = data["engine"]

    if "container_name" in data:
        if not isinstance(data["container_name"], str) or not data["container_name"]:
            raise ConfigError("'container_name' must be a non-empty string")
        config.container_name = data["container_name"]

    if "image" in data:
        config.image = _parse_image(data["image"])

    if "packages" in data:
        packages = data["packages"]
        if not isinstance(packages, list) or not all(
            isinstance(p, str) and p for p in packages
        ):
            raise ConfigError("'packages' must be a list of package names")
        config.packages = list(packages)

    return config


def _parse_image(data) -> ImageConfig:
    if not isinstance(data, dict):
        raise ConfigError("'image' must be a mapping with 'name' and 'version'")

    image = ImageConfig()
    if "name" in data:
        image.name = str(data["name"])
    if "version" in data:
        # YAML reads 24.04 as a float
        image.version = str(data["version"])
    return image
