"""
Resolve command implementation.

Shows which tool the compile step would run. The architecture and SDK pin
come from the command line first, then from ``winreskit.yaml``, then from
the build environment.
"""

import logging

from winreskit.cli.utils import build_environment, load_config
from winreskit.core.environment import preferred_sdk_version
from winreskit.core.exceptions import ResolutionError
from winreskit.core.platform import detect_target
from winreskit.toolchain.resolver import resolve
from winreskit.toolchain.sdk import Arch, discover

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    env = build_environment(args)
    config = load_config(args, env)

    arch_name = args.arch or config.arch or detect_target(env).arch
    if arch_name is None:
        raise ResolutionError("Could not detect the target architecture, use --arch")

    preferred = args.sdk_version or config.sdk_version or preferred_sdk_version(env)
    tool = resolve(discover(), args.tool, Arch.from_name(arch_name), preferred)

    print(f"Tool:        {tool.path}")
    print(f"SDK version: {tool.sdk_version}")
    print(f"Root:        {tool.installed_root}")
    print(f"Arch:        {tool.arch}")
    for category in sorted(tool.include_dirs):
        print(f"Include:     {tool.include_dirs[category]}")
    for category in sorted(tool.lib_dirs):
        print(f"Lib:         {tool.lib_dirs[category]}")

    return 0
