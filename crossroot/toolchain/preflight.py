"""
Host toolchain preflight checks.

This module checks the two host prerequisites of a cross build that do not
depend on the sysroot: the Rust target being installed and a GNU
cross-linker being available on PATH. Every check always runs, so a single
pass reports every remediation step.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Union

from crossroot.core.exceptions import (
    MissingCrossLinker,
    MissingToolchainTarget,
    PreflightError,
)
from crossroot.core.filesystem import find_executable
from crossroot.cross.targets import TargetPlatform, get_target

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of a preflight check."""

    name: str
    passed: bool
    message: str
    fix_command: Optional[str] = None
    fixable: bool = False
    remediation: List[str] = field(default_factory=list)
    error: Optional[PreflightError] = None


@dataclass
class FixResult:
    """Result of an automated fix attempt."""

    success: bool
    message: str
    action_taken: Optional[str] = None


class PreflightCheck(ABC):
    """Base class for preflight checks with optional auto-fix capability."""

    name = "Check"

    @abstractmethod
    def check(self) -> CheckResult:
        """Run the check."""
        pass

    def can_autofix(self) -> bool:
        """Whether this check supports automatic fixing."""
        return False

    def fix(self) -> FixResult:
        """
        Attempt to automatically fix the issue.

        Returns:
            FixResult indicating success/failure
        """
        return FixResult(
            success=False,
            message="Auto-fix not implemented for this check",
            action_taken=None,
        )


class InstalledTargetCheck(PreflightCheck):
    """Check that the target triple is installed through rustup."""

    name = "Rust Target"

    def __init__(self, target: TargetPlatform, rustup: str = "rustup"):
        self.target = target
        self.rustup = rustup

    def installed_targets(self) -> List[str]:
        """
        List installed build targets.

        Raises:
            FileNotFoundError: If rustup is not installed
            subprocess.CalledProcessError: If rustup fails
        """
        result = subprocess.run(
            [self.rustup, "target", "list", "--installed"],
            capture_output=True,
            text=True,
            check=True,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def check(self) -> CheckResult:
        triple = self.target.triple
        add_command = f"{self.rustup} target add {triple}"

        try:
            installed = self.installed_targets()
        except FileNotFoundError:
            return CheckResult(
                name=self.name,
                passed=False,
                message=f"{self.rustup} not found in PATH",
                fix_command="Install rustup from https://rustup.rs/",
                fixable=False,
                remediation=[
                    "Install rustup from https://rustup.rs/",
                    f"Then run: {add_command}",
                ],
                error=MissingToolchainTarget(triple),
            )
        except subprocess.CalledProcessError as e:
            return CheckResult(
                name=self.name,
                passed=False,
                message=f"Could not list installed targets: {(e.stderr or '').strip()}",
                fix_command=f"Run: {add_command}",
                fixable=True,
                remediation=[f"Run: {add_command}"],
                error=MissingToolchainTarget(triple),
            )

        if triple in installed:
            return CheckResult(
                name=self.name, passed=True, message=f"{triple} installed"
            )

        return CheckResult(
            name=self.name,
            passed=False,
            message=f"Rust target not installed: {triple}",
            fix_command=f"Run: {add_command}",
            fixable=True,
            remediation=[f"Install the target: {add_command}"],
            error=MissingToolchainTarget(triple),
        )

    def can_autofix(self) -> bool:
        return True

    def fix(self) -> FixResult:
        """Install the target with rustup."""
        command = [self.rustup, "target", "add", self.target.triple]
        logger.info(f"Installing Rust target: {self.target.triple}")
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except FileNotFoundError:
            return FixResult(success=False, message=f"{self.rustup} not found in PATH")

        if result.returncode != 0:
            return FixResult(
                success=False,
                message=f"Failed to add target: {(result.stderr or result.stdout).strip()}",
            )
        return FixResult(
            success=True,
            message=f"Installed Rust target {self.target.triple}",
            action_taken=" ".join(command),
        )


class CrossLinkerCheck(PreflightCheck):
    """Check that the GNU cross-linker for the target is on PATH."""

    name = "Cross Linker"

    def __init__(self, target: TargetPlatform):
        self.target = target

    def remediation(self) -> List[str]:
        """Alternative ways to get a cross-linker, preferred first."""
        triple = self.target.triple
        return [
            "Option 1 - Install via Homebrew (macOS): "
            f"brew tap messense/macos-cross-toolchains && brew install {triple}",
            "Option 2 - Install via your distribution package manager: "
            f"sudo apt-get install {self.target.debian_gcc_package}",
            "Option 3 - Use zigbuild: cargo install cargo-zigbuild, "
            f"then: cargo zigbuild --target {triple}",
            "Option 4 - Use cross (Docker-based): cargo install cross, "
            f"then: cross build --target {triple}",
        ]

    def check(self) -> CheckResult:
        linker = self.target.linker
        path = find_executable(linker)

        if path is not None:
            return CheckResult(
                name=self.name, passed=True, message=f"Found cross-compiler: {path}"
            )

        return CheckResult(
            name=self.name,
            passed=False,
            message=f"{linker} not found!",
            fix_command="Install a cross-compiler toolchain for linking",
            fixable=False,
            remediation=self.remediation(),
            error=MissingCrossLinker(linker),
        )


class PreflightRunner:
    """Runs all preflight checks and auto-fixes."""

    def __init__(self, target: Union[str, TargetPlatform]):
        if isinstance(target, str):
            target = get_target(target)
        self.target = target
        self.checks: List[PreflightCheck] = [
            InstalledTargetCheck(target),
            CrossLinkerCheck(target),
        ]

    def run_all_checks(self) -> List[CheckResult]:
        """Run every check; a failing check never stops the next one."""
        results = []
        for check in self.checks:
            result = check.check()
            if result.passed:
                logger.debug(f"Check passed: {result.name}")
            else:
                logger.debug(f"Check failed: {result.name}: {result.message}")
            results.append(result)
        return results

    def fix_all(self, results: List[CheckResult]) -> List[FixResult]:
        """
        Attempt to fix all fixable issues.

        Args:
            results: Results from run_all_checks(), in check order

        Returns:
            List of fix results
        """
        fix_results = []
        for check, result in zip(self.checks, results):
            if result.passed or not result.fixable or not check.can_autofix():
                continue
            logger.info(f"Attempting to fix: {result.name}")
            fix_results.append(check.fix())
        return fix_results


def check(target: Union[str, TargetPlatform]) -> List[CheckResult]:
    """
    Run all preflight checks for a target.

    Args:
        target: Target triple or TargetPlatform

    Returns:
        One CheckResult per check, always all of them
    """
    return PreflightRunner(target).run_all_checks()
