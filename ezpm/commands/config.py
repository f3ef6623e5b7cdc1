"""ezpm config command."""

from typing import Any

from ezplug.config import default_config_text


def config_command(args: Any) -> int:
    """Print a settings file holding every default value."""
    print(default_config_text(), end="")
    return 0
