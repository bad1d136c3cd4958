"""
Pytest configuration and shared fixtures for crossroot tests.
"""

import pytest
import tempfile
from pathlib import Path, PurePosixPath
from typing import Dict, Generator, List, Optional

from crossroot.container.engine import CommandResult, ContainerEngine
from crossroot.core.exceptions import (
    ContainerNameConflict,
    ContainerStartFailure,
    EngineUnavailable,
)
from crossroot.sysroot.verifier import build_checklist

TRIPLE = "x86_64-unknown-linux-gnu"


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require a container engine",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


# ============================================================================
# Fake Container Engine
# ============================================================================


def _result(args, returncode=0, stdout="", stderr="") -> CommandResult:
    return CommandResult(args=list(args), returncode=returncode, stdout=stdout, stderr=stderr)


class FakeEngine(ContainerEngine):
    """
    In-memory container engine.

    The container filesystem is a mapping of absolute file paths to contents.
    Every call is appended to ``calls`` as a tuple starting with the
    operation name.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        super().__init__("fake-docker")
        self.files: Dict[str, str] = dict(files or {})
        self.calls: List[tuple] = []
        self.unavailable = False
        self.conflicts = 0  # number of starts that report a name conflict
        self.start_error = False
        self.exec_returncode = 0
        self.exec_output = ""
        self.exec_exception: Optional[BaseException] = None
        self.failing_copies: Dict[str, str] = {}
        self.running: set = set()

    def ops(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def ping(self) -> None:
        self.calls.append(("ping",))
        if self.unavailable:
            raise EngineUnavailable(self.binary, "daemon not running")

    def run_detached(self, name, image, platform=None, command=None) -> str:
        self.calls.append(("run", name, image, platform))
        if self.conflicts:
            self.conflicts -= 1
            raise ContainerNameConflict(
                name, image, f'Conflict. The container name "/{name}" is already in use'
            )
        if self.start_error:
            raise ContainerStartFailure(name, image, "manifest unknown")
        self.running.add(name)
        return "c0ffee"

    def exec(self, name, command) -> CommandResult:
        self.calls.append(("exec", name, command))
        if self.exec_exception is not None:
            raise self.exec_exception
        return _result(
            command,
            returncode=self.exec_returncode,
            stdout=self.exec_output,
            stderr="E: Unable to locate package" if self.exec_returncode else "",
        )

    def copy_from(self, name, container_path, host_path) -> CommandResult:
        self.calls.append(("cp", name, container_path, Path(host_path)))
        args = ["cp", f"{name}:{container_path}", str(host_path)]
        if container_path in self.failing_copies:
            return _result(args, 1, stderr=self.failing_copies[container_path])

        source = PurePosixPath(container_path)
        matches = [
            p for p in self.files if p == container_path or p.startswith(container_path + "/")
        ]
        if not matches:
            return _result(
                args,
                1,
                stderr=f"Error response from daemon: Could not find the file {container_path} in container {name}",
            )

        for path in matches:
            rel = PurePosixPath(path).relative_to(source.parent)
            dest = Path(host_path).joinpath(*rel.parts)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(self.files[path])
        return _result(args)

    def stop(self, name) -> CommandResult:
        self.calls.append(("stop", name))
        self.running.discard(name)
        return _result(["stop", name])

    def remove(self, name, force=False) -> CommandResult:
        self.calls.append(("rm", name, force))
        self.running.discard(name)
        return _result(["rm", name])


def container_files(triple: str = TRIPLE, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Container filesystem holding every checklist file for triple."""
    files = {
        "/" + str(entry.relative_path): entry.name
        for entry in build_checklist(triple).entries
    }
    files["/usr/share/pkgconfig/zlib.pc"] = "Name: zlib"
    files.update(extra or {})
    return files


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Fake engine whose container holds a complete x86_64 sysroot."""
    return FakeEngine(container_files())


@pytest.fixture
def populated_sysroot(temp_dir: Path) -> Path:
    """Sysroot directory containing every checklist file for x86_64."""
    sysroot = temp_dir / ".cross-sysroot"
    for entry in build_checklist(TRIPLE).entries:
        path = sysroot.joinpath(*entry.relative_path.parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(entry.name)
    return sysroot


@pytest.fixture
def make_engine():
    """Factory for fake engines; files default to a complete sysroot for triple."""

    def factory(files: Optional[Dict[str, str]] = None, triple: str = TRIPLE) -> FakeEngine:
        return FakeEngine(container_files(triple) if files is None else files)

    return factory
