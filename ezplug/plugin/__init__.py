"""
ezplug Plugin System - discovering and enabling archive-packaged plugins.

This module handles:
- Descriptor extraction from .ez archives
- Catalog scanning
- Dependency resolution
- Version merging
- Copying enabled archives and persisting the enabled set
"""

__all__ = []
