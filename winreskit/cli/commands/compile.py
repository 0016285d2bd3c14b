"""
Compile command implementation.

Runs the whole pipeline: resource script, resource compiler, link
directives on stdout.
"""

import logging

from winreskit.cli.utils import create_resource
from winreskit.core.platform import TargetInfo

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the compile command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    resource = create_resource(args)

    if args.output_dir:
        resource.set_output_directory(str(args.output_dir))
    if args.resource_file:
        resource.set_resource_file(str(args.resource_file))
    if args.toolchain:
        resource.target = TargetInfo(
            os=resource.target.os, family=args.toolchain, arch=resource.target.arch
        )

    artifact = resource.compile()
    logger.info(f"Resource artifact: {artifact}")
    return 0
