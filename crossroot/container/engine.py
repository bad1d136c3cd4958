"""
Container engine adapter.

Drives a Docker-compatible container engine through its command-line client.
Only the four operations the sysroot builder needs are exposed: start a
detached container, execute a command in it, copy a path out of it, and stop
and remove it. Podman accepts the same arguments, so the binary name is the
only engine-specific setting.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from crossroot.core.exceptions import (
    ContainerNameConflict,
    ContainerStartFailure,
    EngineUnavailable,
)
from crossroot.core.filesystem import find_executable

logger = logging.getLogger(__name__)

# Substrings engines print when `cp` is given a source that does not exist
_MISSING_PATH_MARKERS = (
    "could not find the file",
    "no such file or directory",
    "no such container:path",
)

_NAME_CONFLICT_MARKERS = ("is already in use", "already exists")


@dataclass
class CommandResult:
    """Outcome of one engine client invocation."""

    args: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return (self.stdout + self.stderr).strip()

    def is_missing_path(self) -> bool:
        """Whether a failed copy reported a nonexistent source path."""
        text = self.stderr.lower()
        return any(marker in text for marker in _MISSING_PATH_MARKERS)


class ContainerEngine:
    """
    Thin wrapper around a Docker-compatible CLI.

    Example:
        >>> engine = ContainerEngine("docker")
        >>> engine.ping()
        >>> engine.run_detached("builder", "ubuntu:24.04", platform="linux/amd64")
    """

    def __init__(self, binary: str = "docker"):
        """
        Initialize engine adapter.

        Args:
            binary: Engine client executable name ('docker' or 'podman')
        """
        self.binary = binary

    def _run(self, args: List[str]) -> CommandResult:
        command = [self.binary] + args
        logger.debug(f"Running: {' '.join(command)}")
        try:
            completed = subprocess.run(command, capture_output=True, text=True)
        except FileNotFoundError:
            raise EngineUnavailable(self.binary, "client executable not found")
        return CommandResult(
            args=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def ping(self) -> None:
        """
        Check that the engine client exists and its daemon answers.

        Raises:
            EngineUnavailable: If the client is missing or the daemon is unreachable
        """
        if find_executable(self.binary) is None:
            raise EngineUnavailable(self.binary, "client executable not found on PATH")

        result = self._run(["info", "--format", "{{.ServerVersion}}"])
        if not result.ok:
            raise EngineUnavailable(self.binary, result.output or "daemon not running")
        logger.debug(f"{self.binary} server version {result.stdout.strip()}")

    def run_detached(
        self,
        name: str,
        image: str,
        platform: Optional[str] = None,
        command: Optional[List[str]] = None,
    ) -> str:
        """
        Start a detached container.

        Args:
            name: Container name
            image: Image reference (e.g., 'ubuntu:24.04')
            platform: Optional platform to run (e.g., 'linux/amd64')
            command: Command keeping the container alive (default: sleep infinity)

        Returns:
            Container ID printed by the engine

        Raises:
            ContainerNameConflict: If a container with this name already exists
            ContainerStartFailure: If the container cannot be started
        """
        args = ["run", "--name", name]
        if platform:
            args += ["--platform", platform]
        args += ["-d", image]
        args += command if command is not None else ["sleep", "infinity"]

        result = self._run(args)
        if result.ok:
            return result.stdout.strip()

        stderr = result.stderr.lower()
        if any(marker in stderr for marker in _NAME_CONFLICT_MARKERS):
            raise ContainerNameConflict(name, image, result.output)
        raise ContainerStartFailure(name, image, result.output)

    def exec(self, name: str, command: List[str]) -> CommandResult:
        """Run a command inside a running container."""
        return self._run(["exec", name] + command)

    def copy_from(self, name: str, container_path: str, host_path: Path) -> CommandResult:
        """Copy a file or directory tree out of a container."""
        return self._run(["cp", f"{name}:{container_path}", str(host_path)])

    def stop(self, name: str) -> CommandResult:
        return self._run(["stop", name])

    def remove(self, name: str, force: bool = False) -> CommandResult:
        args = ["rm"]
        if force:
            args.append("-f")
        return self._run(args + [name])
