"""
Generate-config command implementation.

Checks the host toolchain and sysroot, then writes the Cargo configuration
for cross-compiling against the sysroot.
"""

import logging

from crossroot.cli.utils import (
    print_check_results,
    print_error,
    print_warning,
    resolve_config,
    safe_print,
)
from crossroot.core.exceptions import IncompleteSysroot, MissingSysroot
from crossroot.sysroot.verifier import verify
from crossroot.toolchain.config_generator import ConfigGenerator
from crossroot.toolchain.preflight import PreflightRunner

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the generate-config command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when the configuration was written)
    """
    config = resolve_config(args)

    print("=== Creating cross compilation config ===")
    print(f"Target: {config.target}")
    print(f"Sysroot: {config.sysroot}")
    print("")

    runner = PreflightRunner(config.target)
    results = runner.run_all_checks()

    if args.fix:
        for fix_result in runner.fix_all(results):
            if fix_result.success:
                safe_print(f"✓ {fix_result.message}")
            else:
                print_warning(fix_result.message)
        results = runner.run_all_checks()

    failed = print_check_results(results)
    print("")

    if failed and not args.force:
        print_error(
            f"{failed} preflight check(s) failed",
            "Fix the issues above or re-run with --force to write the configuration anyway",
        )
        return 1

    if not config.sysroot.is_dir():
        print("Run 'crossroot build-sysroot' to create the sysroot first.")
        raise MissingSysroot(config.sysroot)

    try:
        verify(config.sysroot, config.target).raise_for_missing()
    except IncompleteSysroot as e:
        logger.warning(str(e))
        print_warning(
            f"Sysroot is missing {len(e.missing)} file(s); "
            "the generated configuration may only work for narrower builds"
        )

    generator = ConfigGenerator(args.project_root, config.output)
    artifact = generator.generate(config.sysroot, config.target)
    safe_print(f"✓ Created {generator.output_path}")

    if args.print_env:
        print("")
        print(artifact.environment.shell_exports(artifact.linker_env()))
    else:
        print("")
        print("You can now build with: cargo build --release")
        print("The environment variables will be automatically applied from the config file.")
    return 0
