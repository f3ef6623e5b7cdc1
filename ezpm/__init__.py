"""
ezpm - command-line front end for ezplug.

Supports listing plugins, enabling plugins and printing default settings.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
