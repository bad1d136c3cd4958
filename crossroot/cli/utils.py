"""
Shared utilities for CLI commands.

Provides settings resolution and the report formatting used by more than one
command so every command presents checks the same way.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from crossroot.config.parser import CrossrootConfig, load_config
from crossroot.sysroot.verifier import ChecklistGroup, VerificationReport
from crossroot.toolchain.preflight import CheckResult

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def resolve_config(args) -> CrossrootConfig:
    """
    Load crossroot.yaml and apply command-line overrides.

    Args:
        args: Parsed arguments; override attributes are optional

    Returns:
        Configuration with absolute sysroot and output paths
    """
    project_root = Path(args.project_root).absolute()
    config = load_config(project_root, getattr(args, "config", None))

    target = getattr(args, "target", None)
    if target:
        config.target = target

    sysroot = getattr(args, "sysroot", None)
    if sysroot:
        sysroot = Path(sysroot)
        config.sysroot = sysroot if sysroot.is_absolute() else project_root / sysroot

    output = getattr(args, "output", None)
    if output:
        output = Path(output)
        config.output = output if output.is_absolute() else project_root / output

    packages = getattr(args, "packages", None)
    if packages:
        config.packages = list(packages)

    image_version = getattr(args, "image_version", None)
    if image_version:
        config.image.version = image_version

    engine = getattr(args, "engine", None)
    if engine:
        config.engine = engine

    container_name = getattr(args, "container_name", None)
    if container_name:
        config.container_name = container_name

    logger.debug(f"Resolved configuration: {config}")
    return config


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for limited consoles.

    Falls back to ASCII markers if the check marks can't be encoded.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        safe_message = (
            message.replace("✓", "[OK]").replace("✗", "[MISSING]").replace("⚠", "[WARN]")
        )
        print(safe_message, file=file)


def print_report(report: VerificationReport):
    """Print a verification report grouped by checklist partition."""
    sections = [
        (ChecklistGroup.CRITICAL, "Checking critical library files..."),
        (ChecklistGroup.STARTUP, "Checking startup object files..."),
    ]
    for group, title in sections:
        print(title)
        for status in report.group(group):
            if status.found:
                safe_print(f"✓ Found: {status.path}")
            else:
                safe_print(f"✗ Missing: {status.path}")
        print("")


def print_check_results(results: List[CheckResult], show_fix: bool = True) -> int:
    """
    Print preflight results with remediation for each failure.

    Args:
        results: Check results in run order
        show_fix: Whether to print remediation lines

    Returns:
        Number of failed checks
    """
    failed = 0
    for result in results:
        if result.passed:
            safe_print(f"✓ {result.name}: {result.message}")
            continue

        failed += 1
        safe_print(f"✗ {result.name}: {result.message}")
        logger.error(f"{result.name}: {result.message}")
        if show_fix:
            for line in result.remediation or [result.fix_command]:
                if line:
                    print(f"   {line}")
    return failed
