"""
Run command implementation.

Runs a command with the cross-compilation environment applied to a copy of
the current process environment.
"""

import logging
import os
import subprocess

from crossroot.cli.utils import print_error, resolve_config
from crossroot.toolchain.config_generator import build_artifact

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the run command.

    Args:
        args: Parsed command-line arguments with ``child_command`` list

    Returns:
        Exit code of the child process
    """
    command = list(args.child_command or [])
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print_error("No command given", "Usage: crossroot run -- cargo build")
        return 2

    config = resolve_config(args)
    artifact = build_artifact(config.sysroot, config.target)

    env = artifact.environment.apply_to(os.environ)
    env.update(artifact.linker_env())

    logger.debug(f"Running {command} for {artifact.target}")
    try:
        return subprocess.run(command, env=env).returncode
    except FileNotFoundError:
        print_error(f"Command not found: {command[0]}")
        return 127
