"""
Toolchain discovery module for winreskit.

This module provides functionality for:
- Windows SDK inventory from the installed roots registry key
- Selection of one resource compiler among side-by-side SDK versions
"""

from winreskit.toolchain.sdk import (
    INSTALLED_ROOTS_KEY,
    ALL_ARCHS,
    Arch,
    ArchToolset,
    InstalledRoot,
    InstalledRoots,
    Inventory,
    RegistryReader,
    RegQueryReader,
    ResolvedTool,
    Sdk,
    discover,
    parse_installed_roots,
)
from winreskit.toolchain.resolver import (
    RC_TOOL,
    resolve,
    resolve_on_path,
    version_key,
)

__all__ = [
    # Inventory
    "INSTALLED_ROOTS_KEY",
    "ALL_ARCHS",
    "Arch",
    "ArchToolset",
    "InstalledRoot",
    "InstalledRoots",
    "Inventory",
    "RegistryReader",
    "RegQueryReader",
    "ResolvedTool",
    "Sdk",
    "discover",
    "parse_installed_roots",
    # Resolver
    "RC_TOOL",
    "resolve",
    "resolve_on_path",
    "version_key",
]
