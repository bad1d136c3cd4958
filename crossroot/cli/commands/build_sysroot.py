"""
Build-sysroot command implementation.

Creates a Linux sysroot from packages installed in an ephemeral container
and verifies it.
"""

import logging

from crossroot.cli.utils import print_report, resolve_config, safe_print
from crossroot.container.engine import ContainerEngine
from crossroot.core.locking import sysroot_lock
from crossroot.sysroot.builder import SysrootBuilder
from crossroot.sysroot.packages import PackageSet
from crossroot.toolchain.environment import ToolchainEnvironment

logger = logging.getLogger(__name__)

_PKG_CONFIG_VARS = (
    "PKG_CONFIG_DIR",
    "PKG_CONFIG_LIBDIR",
    "PKG_CONFIG_SYSROOT_DIR",
    "PKG_CONFIG_ALLOW_CROSS",
)


def run(args) -> int:
    """
    Run the build-sysroot command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for a complete sysroot, 1 otherwise)
    """
    config = resolve_config(args)
    packages = PackageSet(config.packages)

    print("=== Creating Linux sysroot ===")
    print(f"Target: {config.target}")
    print(f"Sysroot location: {config.sysroot}")
    print(f"Base image: {config.image.reference}")
    print(f"Packages to install: {' '.join(packages)}")
    print("")

    builder = SysrootBuilder(
        ContainerEngine(config.engine),
        config.image.reference,
        container_name=config.container_name,
    )

    with sysroot_lock(config.sysroot, timeout=args.lock_timeout):
        result = builder.build(config.sysroot, packages, config.target)

    for missing in result.missing_optional:
        logger.info(f"Optional path not copied: {missing.container_path}")

    print("")
    print("Verifying sysroot...")
    print_report(result.report)

    if not result.report.complete:
        safe_print("✗ Some files are missing. The sysroot may be incomplete.")
        return 1

    safe_print("✓ Sysroot is ready for cross-compilation!")
    print("")
    print("Next steps:")
    print("1. Run: crossroot generate-config")
    print("2. Or set these environment variables in your shell:")
    print("")
    env = ToolchainEnvironment.for_sysroot(config.sysroot, config.target)
    pkg_config_env = ToolchainEnvironment({name: env[name] for name in _PKG_CONFIG_VARS})
    for line in pkg_config_env.shell_exports().splitlines():
        print(f"   {line}")
    print("")
    print(f"   Then run: cargo build --target {config.target}")
    return 0
