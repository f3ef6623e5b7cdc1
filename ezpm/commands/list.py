"""
ezpm list command.

Lists every plugin found in the distribution and plugins directories.
"""

from typing import Any

from ezpm.commands import build_manager


def format_plugin(plugin: Any, enabled: bool) -> str:
    """Format one listing line, e.g. "[E] amqp_client-2.5.0: AMQP client"."""
    marker = "[E]" if enabled else "[N]"
    return f"{marker} {plugin.name}-{plugin.version}: {plugin.description}"


def list_command(args: Any) -> int:
    """
    Execute list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    manager = build_manager(args)
    for plugin, enabled in manager.list_plugins():
        print(format_plugin(plugin, enabled))
    return 0
