"""Project configuration (crossroot.yaml)."""

from .parser import CrossrootConfig, ImageConfig, load_config, parse_config

__all__ = ["CrossrootConfig", "ImageConfig", "load_config", "parse_config"]
