"""
Verify command implementation.

Checks an existing sysroot against the file checklist for its target.
"""

import logging

from crossroot.cli.utils import print_report, resolve_config, safe_print
from crossroot.core.exceptions import MissingSysroot
from crossroot.sysroot.verifier import verify

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when nothing is missing)
    """
    config = resolve_config(args)

    if not config.sysroot.is_dir():
        raise MissingSysroot(config.sysroot)

    report = verify(config.sysroot, config.target)
    print_report(report)

    if report.complete:
        safe_print("✓ Sysroot is ready for cross-compilation!")
        return 0

    safe_print(f"✗ {len(report.missing)} file(s) missing. The sysroot may be incomplete.")
    return 1
