"""
Cross-compilation support for crossroot.

This module provides the supported target platforms and their sysroot layout.
"""

from crossroot.cross.targets import TargetPlatform, get_target, supported_triples

__all__ = ["TargetPlatform", "get_target", "supported_triples"]
