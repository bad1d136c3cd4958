"""
Doctor command for diagnosing the host toolchain.

Runs every preflight check for the target and prints remediation for each
failure, optionally fixing what can be fixed automatically.
"""

import logging

from crossroot.cli.utils import print_check_results, resolve_config, safe_print
from crossroot.toolchain.preflight import PreflightRunner

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run doctor command.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    config = resolve_config(args)
    runner = PreflightRunner(config.target)
    results = runner.run_all_checks()

    if args.fix and any(r.fixable and not r.passed for r in results):
        fix_results = runner.fix_all(results)
        for fix_result in fix_results:
            marker = "✓" if fix_result.success else "✗"
            safe_print(f"{marker} {fix_result.message}")
        results = runner.run_all_checks()

    failed = print_check_results(results)
    passed = len(results) - failed
    safe_print(f"\nSummary: {passed} passed, {failed} failed")

    if failed:
        logger.error(f"Preflight failed: {failed} issue(s)")
        return 1
    return 0
