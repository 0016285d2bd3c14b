"""
Render command implementation.

Writes the generated resource script without compiling it.
"""

import logging

from winreskit.cli.utils import create_resource
from winreskit.resource.serializer import render

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the render command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    resource = create_resource(args)

    if args.output:
        path = resource.write_resource_file(args.output)
        logger.info(f"Wrote {path}")
    else:
        print(render(resource.descriptor), end="")

    return 0
