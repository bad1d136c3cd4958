"""Ordered, immutable set of platform packages to install into a sysroot."""

import re
from typing import Iterable, Iterator, Tuple

# Debian package names, optionally with an architecture qualifier or version pin
_PACKAGE_NAME = re.compile(r"^[a-z0-9][a-z0-9+.\-]*(:[a-z0-9\-]+)?(=[A-Za-z0-9.+:~\-]+)?$")


class PackageSet:
    """
    Package names in install order, duplicates dropped.

    Example:
        >>> packages = PackageSet(["libudev-dev", "libssl-dev", "libudev-dev"])
        >>> list(packages)
        ['libudev-dev', 'libssl-dev']
    """

    __slots__ = ("_names",)

    def __init__(self, names: Iterable[str]):
        ordered = []
        for name in names:
            if not isinstance(name, str) or not _PACKAGE_NAME.match(name):
                raise ValueError(f"Invalid package name: {name!r}")
            if name not in ordered:
                ordered.append(name)
        object.__setattr__(self, "_names", tuple(ordered))

    def __setattr__(self, key, value):
        raise AttributeError("PackageSet is immutable")

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def with_prefix(self, *names: str) -> "PackageSet":
        """Return a new set with names installed ahead of this one."""
        return PackageSet(list(names) + list(self._names))

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name) -> bool:
        return name in self._names

    def __eq__(self, other) -> bool:
        if not isinstance(other, PackageSet):
            return NotImplemented
        return self._names == other._names

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"PackageSet({list(self._names)!r})"
