"""
Cross-compilation environment variables.

The environment is an explicit value computed from a sysroot and target. It
is rendered into the build configuration and applied to child processes by
copying, never by mutating the current process environment.
"""

import shlex
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from crossroot.cross.targets import TargetPlatform, get_target

# Rendering order of the variables
VARIABLE_NAMES = (
    "PKG_CONFIG_DIR",
    "PKG_CONFIG_LIBDIR",
    "PKG_CONFIG_SYSROOT_DIR",
    "PKG_CONFIG_ALLOW_CROSS",
    "OPENSSL_DIR",
    "OPENSSL_LIB_DIR",
    "OPENSSL_INCLUDE_DIR",
    "CFLAGS",
    "CXXFLAGS",
    "CPPFLAGS",
    "LDFLAGS",
)


class SysrootLayout:
    """Absolute paths inside a sysroot for one target."""

    def __init__(self, sysroot: Union[str, Path], target: TargetPlatform):
        self.root = Path(sysroot).absolute()
        self.target = target

    def _join(self, rel: str) -> str:
        return str(self.root.joinpath(*PurePosixPath(rel).parts))

    @property
    def usr(self) -> str:
        return self._join("usr")

    @property
    def usr_lib_arch(self) -> str:
        return self._join(f"usr/lib/{self.target.multiarch}")

    @property
    def lib_arch(self) -> str:
        return self._join(f"lib/{self.target.multiarch}")

    @property
    def include(self) -> str:
        return self._join("usr/include")

    @property
    def include_arch(self) -> str:
        return self._join(f"usr/include/{self.target.multiarch}")

    @property
    def pkgconfig_dirs(self) -> List[str]:
        """pkg-config search directories, architecture-specific first."""
        return [
            self._join(f"usr/lib/{self.target.multiarch}/pkgconfig"),
            self._join("usr/lib/pkgconfig"),
            self._join("usr/share/pkgconfig"),
        ]


class ToolchainEnvironment(Mapping[str, str]):
    """
    Immutable mapping of environment variable names to values.

    Example:
        >>> env = ToolchainEnvironment.for_sysroot(Path("/sr"), "x86_64-unknown-linux-gnu")
        >>> env["PKG_CONFIG_SYSROOT_DIR"]
        '/sr'
    """

    def __init__(self, items: Union[Mapping[str, str], List[Tuple[str, str]]]):
        self._items: Tuple[Tuple[str, str], ...] = tuple(
            (str(k), str(v)) for k, v in dict(items).items()
        )
        self._index = dict(self._items)

    @classmethod
    def for_sysroot(
        cls, sysroot: Union[str, Path], target: Union[str, TargetPlatform]
    ) -> "ToolchainEnvironment":
        """
        Derive the environment for a sysroot.

        Args:
            sysroot: Sysroot root directory (need not be populated)
            target: Target triple or TargetPlatform

        Returns:
            ToolchainEnvironment with the variables in VARIABLE_NAMES order
        """
        if isinstance(target, str):
            target = get_target(target)
        layout = SysrootLayout(sysroot, target)

        include_flags = f"-I{layout.include} -I{layout.include_arch}"

        return cls(
            [
                # An empty PKG_CONFIG_DIR keeps host .pc files out of the search
                ("PKG_CONFIG_DIR", ""),
                ("PKG_CONFIG_LIBDIR", ":".join(layout.pkgconfig_dirs)),
                ("PKG_CONFIG_SYSROOT_DIR", str(layout.root)),
                ("PKG_CONFIG_ALLOW_CROSS", "1"),
                ("OPENSSL_DIR", layout.usr),
                ("OPENSSL_LIB_DIR", layout.usr_lib_arch),
                ("OPENSSL_INCLUDE_DIR", layout.include),
                ("CFLAGS", include_flags),
                ("CXXFLAGS", include_flags),
                ("CPPFLAGS", include_flags),
                ("LDFLAGS", f"-L{layout.usr_lib_arch} -L{layout.lib_arch}"),
            ]
        )

    def __getitem__(self, key: str) -> str:
        return self._index[key]

    def __iter__(self) -> Iterator[str]:
        return (k for k, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ToolchainEnvironment({dict(self._items)!r})"

    def apply_to(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """
        Return a new process environment with these variables applied.

        Args:
            base: Environment to start from (not modified)

        Returns:
            New dict suitable for subprocess ``env=``
        """
        env = dict(base or {})
        env.update(self._items)
        return env

    def shell_exports(self, extra: Optional[Mapping[str, str]] = None) -> str:
        """Render POSIX ``export`` lines for the invoking shell."""
        lines = []
        for name, value in list(self._items) + list((extra or {}).items()):
            lines.append(f"export {name}={shlex.quote(value)}")
        return "\n".join(lines)
