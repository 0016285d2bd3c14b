"""
winreskit CLI argument parser.

This module implements the command-line interface for winreskit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from winreskit.core.exceptions import WinResKitError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("winreskit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _key_value(text: str) -> List[str]:
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return text.split("=", 1)


class CLI:
    """winreskit command-line interface."""

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
            prog="winreskit",
            description="winreskit - Windows resource compiler driver for native builds",
            epilog='Use "winreskit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"winreskit {__version__}"
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
            help="Path to configuration file (default: <project root>/winreskit.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            help="Project root directory (default: $CARGO_MANIFEST_DIR)",
        )
        parser.add_argument(
            "--env",
            action="append",
            type=_key_value,
            metavar="KEY=VALUE",
            help="Override a build environment value (can be used multiple times)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_discover_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_render_command(subparsers)
        self._add_compile_command(subparsers)

        return parser

    def _add_discover_command(self, subparsers):
        """Add 'discover' subcommand."""
        parser = subparsers.add_parser(
            "discover",
            help="List installed Windows SDKs",
            description="List installation roots, SDK versions and per-architecture tools",
        )
        parser.add_argument(
            "--tool",
            default="rc.exe",
            metavar="NAME",
            help="Tool to check per architecture [default: rc.exe]",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Show which resource compiler would be used",
            description="Select one tool among the installed SDKs",
        )
        parser.add_argument(
            "--tool",
            default="rc.exe",
            metavar="NAME",
            help="Tool to resolve [default: rc.exe]",
        )
        parser.add_argument(
            "--arch",
            choices=["arm", "arm64", "x64", "x86"],
            metavar="ARCH",
            help="Target architecture (arm|arm64|x64|x86) [default: detected]",
        )
        parser.add_argument(
            "--sdk-version",
            metavar="VERSION",
            help="Exact SDK version to prefer [default: $WindowsSDKVersion]",
        )

    def _add_render_command(self, subparsers):
        """Add 'render' subcommand."""
        parser = subparsers.add_parser(
            "render",
            help="Generate the resource script",
            description="Render the resource script from environment and configuration",
        )
        parser.add_argument(
            "--output",
            "-o",
            type=Path,
            metavar="PATH",
            help="Write to PATH instead of stdout",
        )

    def _add_compile_command(self, subparsers):
        """Add 'compile' subcommand."""
        parser = subparsers.add_parser(
            "compile",
            help="Compile the resource and print link directives",
            description="Generate, compile and announce the Windows resource",
        )
        parser.add_argument(
            "--output-dir",
            type=Path,
            metavar="PATH",
            help="Output directory [default: $OUT_DIR]",
        )
        parser.add_argument(
            "--resource-file",
            type=Path,
            metavar="PATH",
            help="Compile an existing resource script instead of generating one",
        )
        parser.add_argument(
            "--toolchain",
            choices=["msvc", "gnu"],
            metavar="FAMILY",
            help="Toolchain family (msvc|gnu) [default: detected]",
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

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except WinResKitError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
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

        Logs go to stderr; stdout is reserved for build system directives.

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
            stream=sys.stderr,
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
        # Command module mapping
        command_map = {
            "discover": "winreskit.cli.commands.discover",
            "resolve": "winreskit.cli.commands.resolve",
            "render": "winreskit.cli.commands.render",
            "compile": "winreskit.cli.commands.compile",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
