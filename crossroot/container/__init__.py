"""
Container engine access.

Provides the engine adapter and the scoped container session used to
extract sysroot contents.
"""

from crossroot.container.engine import ContainerEngine, CommandResult
from crossroot.container.session import (
    ContainerSession,
    Copied,
    OptionalCopyMissing,
    container_session,
)

__all__ = [
    "ContainerEngine",
    "CommandResult",
    "ContainerSession",
    "Copied",
    "OptionalCopyMissing",
    "container_session",
]
