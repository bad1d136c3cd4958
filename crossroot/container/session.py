"""
Ephemeral container sessions.

A ContainerSession owns one build container from start to removal. The
``container_session`` context manager registers teardown before the
container is started, so the container is stopped and removed on every exit
path: normal completion, a failed install, a failed copy, an interrupt, or
SIGTERM from a CI runner or process supervisor.

Usage:
    with container_session(engine, "ubuntu:24.04", "sysroot-builder") as session:
        session.exec("apt-get update")
        session.copy_out("/usr/include", sysroot / "usr")
"""

import logging
import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from crossroot.container.engine import ContainerEngine
from crossroot.core.exceptions import (
    ContainerNameConflict,
    ContainerStartFailure,
    CopyFailure,
    PackageInstallFailure,
)

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a session's container."""

    NEW = "new"
    RUNNING = "running"
    REMOVED = "removed"


@dataclass(frozen=True)
class Copied:
    """A path that was copied out of the container."""

    container_path: str
    host_path: Path


@dataclass(frozen=True)
class OptionalCopyMissing:
    """An optional path that does not exist in the container."""

    container_path: str
    host_path: Path
    message: str = ""


CopyOutcome = Union[Copied, OptionalCopyMissing]


class ContainerSession:
    """
    One ephemeral container started from a base image.

    Attributes:
        engine: Engine adapter used for all container operations
        image: Image reference the container runs
        name: Container name
        platform: Optional container platform (e.g., 'linux/amd64')
        state: Current lifecycle state
        container_id: ID reported by the engine once running
    """

    def __init__(
        self,
        engine: ContainerEngine,
        image: str,
        name: str,
        platform: Optional[str] = None,
    ):
        self.engine = engine
        self.image = image
        self.name = name
        self.platform = platform
        self.state = SessionState.NEW
        self.container_id: Optional[str] = None
        self._start_attempted = False
        self._closed = False

    def open(self) -> "ContainerSession":
        """
        Start the container.

        A name conflict with a leftover container is resolved by force-removing
        the existing container and retrying the start exactly once.

        Returns:
            self

        Raises:
            EngineUnavailable: If the engine cannot be reached
            ContainerStartFailure: If the container cannot be started
        """
        if self.state is not SessionState.NEW:
            raise ContainerStartFailure(
                self.name, self.image, f"session is already {self.state.value}"
            )

        self.engine.ping()

        logger.info(f"Starting {self.image} container '{self.name}'...")
        self._start_attempted = True
        try:
            self.container_id = self._start()
        except ContainerNameConflict:
            logger.info("Removing old container and creating new one...")
            self.engine.remove(self.name, force=True)
            try:
                self.container_id = self._start()
            except ContainerNameConflict as e:
                raise ContainerStartFailure(self.name, self.image, e.output) from e

        self.state = SessionState.RUNNING
        logger.debug(f"Container '{self.name}' running ({self.container_id})")
        return self

    def _start(self) -> str:
        return self.engine.run_detached(self.name, self.image, platform=self.platform)

    def exec(self, command: str) -> str:
        """
        Run a shell command inside the container synchronously.

        Args:
            command: Shell command line, run through ``bash -c``

        Returns:
            Captured output

        Raises:
            PackageInstallFailure: If the command exits non-zero
        """
        self._require_running()
        result = self.engine.exec(self.name, ["bash", "-c", command])
        if not result.ok:
            raise PackageInstallFailure(command, result.returncode, result.output)
        return result.output

    def copy_out(
        self,
        container_path: str,
        host_path: Union[str, Path],
        required: bool = True,
    ) -> CopyOutcome:
        """
        Copy a file or directory tree out of the container.

        Args:
            container_path: Absolute path inside the container
            host_path: Existing host directory to copy into
            required: Whether a missing source path is fatal

        Returns:
            Copied, or OptionalCopyMissing for an absent optional path

        Raises:
            CopyFailure: If a required path is missing or any copy fails
                for a reason other than a missing source
        """
        self._require_running()
        host_path = Path(host_path)
        result = self.engine.copy_from(self.name, container_path, host_path)

        if result.ok:
            logger.debug(f"Copied {container_path} -> {host_path}")
            return Copied(container_path, host_path)

        if not required and result.is_missing_path():
            logger.warning(f"Optional path not present in container: {container_path}")
            return OptionalCopyMissing(container_path, host_path, result.output)

        raise CopyFailure(container_path, str(host_path), result.output)

    def close(self) -> None:
        """
        Stop and remove the container.

        Runs at most once per session; later calls are no-ops. Teardown
        problems are logged rather than raised so they never mask the error
        that caused an early exit.
        """
        if self._closed:
            return
        self._closed = True

        if not self._start_attempted:
            logger.debug(f"Container '{self.name}' was never started")
            self.state = SessionState.REMOVED
            return

        logger.info("Cleaning up container...")
        if self.state is SessionState.RUNNING:
            stopped = self.engine.stop(self.name)
            if not stopped.ok:
                logger.warning(f"Failed to stop container '{self.name}': {stopped.output}")

        # Force removal also covers a start that failed half-way
        removed = self.engine.remove(self.name, force=True)
        if not removed.ok and self.state is SessionState.RUNNING:
            logger.error(
                f"Failed to remove container '{self.name}': {removed.output}. "
                f"Remove it manually with: {self.engine.binary} rm -f {self.name}"
            )
        self.state = SessionState.REMOVED

    def _require_running(self) -> None:
        if self.state is not SessionState.RUNNING:
            raise ContainerStartFailure(
                self.name, self.image, f"session is {self.state.value}, not running"
            )


# Conventional exit status for a process ended by SIGTERM
SIGTERM_EXIT_CODE = 128 + signal.SIGTERM


def _raise_on_sigterm(signum, frame):
    logger.warning("Received SIGTERM, cleaning up before exit...")
    raise SystemExit(SIGTERM_EXIT_CODE)


@contextmanager
def terminate_on_sigterm():
    """
    Turn SIGTERM into SystemExit for the duration of the block.

    Python does not unwind the stack on SIGTERM by default, so finally
    blocks would never run. Only the main thread can install signal
    handlers; elsewhere the block runs unchanged. The previous handler is
    restored on exit.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.signal(signal.SIGTERM, _raise_on_sigterm)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


@contextmanager
def container_session(
    engine: ContainerEngine,
    image: str,
    name: str,
    platform: Optional[str] = None,
    session: Optional[ContainerSession] = None,
):
    """
    Scoped container acquisition with guaranteed release.

    SIGTERM received inside the block exits with status 143 after the
    container is removed.

    Args:
        engine: Engine adapter
        image: Image reference to start
        name: Container name
        platform: Optional container platform
        session: Pre-built session to manage (for callers that need the handle
            before the container starts)

    Yields:
        Running ContainerSession
    """
    if session is None:
        session = ContainerSession(engine, image, name, platform)
    with terminate_on_sigterm():
        try:
            session.open()
            yield session
        finally:
            session.close()
