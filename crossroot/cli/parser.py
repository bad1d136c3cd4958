"""
crossroot CLI argument parser.

This module implements the command-line interface for crossroot using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from crossroot.config.parser import SUPPORTED_ENGINES
from crossroot.core.exceptions import CrossrootError
from crossroot.cross.targets import supported_triples

try:
    from importlib.metadata import version

    __version__ = version("crossroot")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """crossroot command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="crossroot",
            description="crossroot - Linux sysroots and Cargo cross-compilation config",
            epilog='Use "crossroot COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"crossroot {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./crossroot.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_build_sysroot_command(subparsers)
        self._add_generate_config_command(subparsers)
        self._add_verify_command(subparsers)
        self._add_doctor_command(subparsers)
        self._add_run_command(subparsers)

        return parser

    @staticmethod
    def _add_target_options(parser, sysroot: bool = True):
        parser.add_argument(
            "--target",
            choices=supported_triples(),
            metavar="TRIPLE",
            help="Target triple (default: x86_64-unknown-linux-gnu)",
        )
        if sysroot:
            parser.add_argument(
                "--sysroot",
                metavar="DIR",
                help="Sysroot directory (default: .cross-sysroot)",
            )

    def _add_build_sysroot_command(self, subparsers):
        """Add 'build-sysroot' subcommand."""
        parser = subparsers.add_parser(
            "build-sysroot",
            help="Create a Linux sysroot using a container",
            description="Install packages in an ephemeral container and extract "
            "their libraries and headers into a local sysroot",
        )
        self._add_target_options(parser)
        parser.add_argument(
            "--package",
            dest="packages",
            action="append",
            metavar="NAME",
            help="Package to install (can be used multiple times; replaces the configured list)",
        )
        parser.add_argument(
            "--image-version",
            metavar="TAG",
            help="Base image version tag (default: 24.04)",
        )
        parser.add_argument(
            "--engine",
            choices=SUPPORTED_ENGINES,
            help="Container engine client (default: docker)",
        )
        parser.add_argument(
            "--container-name",
            metavar="NAME",
            help="Name of the build container (default: sysroot-builder)",
        )
        parser.add_argument(
            "--lock-timeout",
            type=float,
            default=60,
            metavar="SECONDS",
            help="Seconds to wait for another build of the same sysroot (default: 60)",
        )

    def _add_generate_config_command(self, subparsers):
        """Add 'generate-config' subcommand."""
        parser = subparsers.add_parser(
            "generate-config",
            help="Generate .cargo/config.toml for cross-compilation",
            description="Check the host toolchain and write the Cargo configuration "
            "for building against the sysroot",
        )
        self._add_target_options(parser)
        parser.add_argument(
            "--output",
            metavar="PATH",
            help="Configuration file to write (default: .cargo/config.toml)",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Write the configuration even if preflight checks fail",
        )
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Install a missing Rust target before generating",
        )
        parser.add_argument(
            "--print-env",
            action="store_true",
            help="Print shell export lines for the generated environment",
        )

    def _add_verify_command(self, subparsers):
        """Add 'verify' subcommand."""
        parser = subparsers.add_parser(
            "verify",
            help="Verify sysroot contents",
            description="Check the sysroot for the libraries, headers and startup files a cross build needs",
        )
        self._add_target_options(parser)

    def _add_doctor_command(self, subparsers):
        """Add 'doctor' subcommand."""
        parser = subparsers.add_parser(
            "doctor",
            help="Diagnose the host toolchain",
            description="Check for the Rust target and the cross-linker and suggest fixes",
        )
        self._add_target_options(parser, sysroot=False)
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Attempt to automatically fix detected issues",
        )

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Run a command with the cross-compilation environment",
            description="Run a command (e.g. cargo build) with the sysroot environment applied",
        )
        self._add_target_options(parser)
        parser.add_argument(
            "child_command",
            metavar="COMMAND",
            nargs=argparse.REMAINDER,
            help="Command to run, after --",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except CrossrootError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            logger.debug("Command failed", exc_info=True)
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "build-sysroot": "crossroot.cli.commands.build_sysroot",
            "generate-config": "crossroot.cli.commands.generate_config",
            "verify": "crossroot.cli.commands.verify",
            "doctor": "crossroot.cli.commands.doctor",
            "run": "crossroot.cli.commands.run",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
