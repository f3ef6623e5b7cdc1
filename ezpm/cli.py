"""
ezpm CLI - ezplug plugin manager.

Usage:
    ezpm list                    List available and enabled plugins
    ezpm enable <plugin>...      Enable plugins and their dependencies
    ezpm config                  Print a default settings file
"""

import argparse
import logging
import sys

COMMANDS = ("list", "enable", "config")

HELP_TEXT = """
ezpm - ezplug plugin manager

Usage:
    ezpm list                    List available and enabled plugins
    ezpm enable <plugin>...      Enable plugins and their dependencies
    ezpm config                  Print a default settings file

Options:
    -c, --config FILE            Settings file (default: ./ezplug.toml)
    --plugins-dir DIR            Directory enabled archives are copied into
    --plugins-dist-dir DIR       Directory holding all available archives
    -v, --verbose                Verbose output
    -h, --help                   Show this help
"""


class UsageError(Exception):
    """Raised when the command line cannot be understood."""

    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = _Parser(
        prog="ezpm",
        description="ezplug plugin manager",
        add_help=False,
    )

    parser.add_argument("-h", "--help", action="store_true", help="Show help")
    parser.add_argument("-c", "--config", default=None, help="Settings file")
    parser.add_argument("--plugins-dir", default=None, help="Enabled plugins dir")
    parser.add_argument(
        "--plugins-dist-dir", default=None, help="Available plugins dir"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    parser.add_argument("command", nargs="?", help="Command to run")
    parser.add_argument("targets", nargs="*", help="Plugin names")

    return parser


def print_help(file=None):
    """Print help message."""
    print(HELP_TEXT.strip(), file=file or sys.stdout)


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for ezpm CLI."""
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print_help(sys.stderr)
        return 1

    if args.help:
        print_help()
        return 0

    if args.command is None:
        print_help(sys.stderr)
        return 1

    if args.command not in COMMANDS:
        invalid = " ".join([args.command, *args.targets])
        print(f"Error: invalid command '{invalid}'", file=sys.stderr)
        print_help(sys.stderr)
        return 1

    configure_logging(args.verbose)

    from ezplug.config import ConfigError
    from ezplug.plugin.manager import PluginError
    from ezplug.plugin.store import PersistenceError

    try:
        if args.command == "list":
            from ezpm.commands.list import list_command

            return list_command(args)

        elif args.command == "enable":
            from ezpm.commands.enable import enable_command

            return enable_command(args)

        elif args.command == "config":
            from ezpm.commands.config import config_command

            return config_command(args)

    except (ConfigError, PluginError, PersistenceError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130

    return 1


if __name__ == "__main__":
    sys.exit(main())
