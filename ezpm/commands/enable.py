"""
ezpm enable command.

Enable plugins, and everything they depend on, from the distribution
directory.
"""

import sys
from typing import Any

from ezpm.commands import build_manager


def enable_command(args: Any) -> int:
    """
    Execute enable command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not args.targets:
        print("Error: No plugins specified", file=sys.stderr)
        print("Usage: ezpm enable <plugin>...", file=sys.stderr)
        return 1

    manager = build_manager(args)
    plan = manager.plan(args.targets)

    if plan.missing:
        print(
            "Warning: the following plugins could not be found: "
            + ", ".join(plan.missing)
        )

    names = [plugin.name for plugin in plan.plugins]
    print(f"Marked for enabling: {', '.join(names) or '(none)'}")
    for plugin in plan.plugins:
        print(f"Enabling {plugin.name}-{plugin.version}")
    sys.stdout.flush()

    report = manager.commit(plan)

    if report.changed:
        print(f"Enabled plugins: {', '.join(report.active)}")
    elif args.verbose:
        print("Enabled plugins unchanged")

    return 0
