"""
Discover command implementation.

Lists the installation roots recorded in the registry and the SDKs found
under them, with per-architecture tool availability.
"""

import logging

from winreskit.toolchain.sdk import ALL_ARCHS, discover

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the discover command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    inventory = discover()

    print("Installed roots:")
    for root in inventory.installed_roots.roots:
        print(f"  {root.name}: {root.path}")

    if not inventory.sdks:
        print("No SDK versions found")
        return 0

    print("SDKs:")
    for sdk in inventory.sdks:
        available = [str(arch) for arch in ALL_ARCHS if sdk.has_tool(arch, args.tool)]
        tools = ", ".join(available) if available else "none"
        print(f"  {sdk.version} ({sdk.installed_root}) - {args.tool}: {tools}")

    return 0
