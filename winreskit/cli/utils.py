"""
Shared utilities for CLI commands.

Provides the environment and configuration plumbing used by every command.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from winreskit.config.parser import ResourceConfig, find_config, parse_config
from winreskit.core.environment import MANIFEST_DIR, DictEnvironment, EnvironmentSource
from winreskit.resource.builder import WindowsResource

logger = logging.getLogger(__name__)


def build_environment(args) -> EnvironmentSource:
    """
    Build the environment source of a CLI invocation.

    Starts from the process environment, then applies ``--env`` overrides
    and ``--project-root``.

    Args:
        args: Parsed arguments

    Returns:
        Environment source
    """
    values = dict(os.environ)
    for key, value in getattr(args, "env", None) or []:
        values[key] = value

    project_root = getattr(args, "project_root", None)
    if project_root is not None:
        values[MANIFEST_DIR] = str(Path(project_root).resolve())

    return DictEnvironment(values)


def load_config(args, env: EnvironmentSource) -> ResourceConfig:
    """
    Load the configuration file, if any.

    ``--config`` must exist when given; the default
    ``<project root>/winreskit.yaml`` is optional.

    Raises:
        ConfigError: If the configuration file is missing or invalid
    """
    config_path: Optional[Path] = getattr(args, "config", None)
    if config_path is None:
        root = env.get(MANIFEST_DIR)
        config_path = find_config(Path(root)) if root else None

    if config_path is None:
        logger.debug("No configuration file, using environment defaults")
        return ResourceConfig()

    logger.debug(f"Loading configuration from {config_path}")
    return parse_config(config_path)


def create_resource(args) -> WindowsResource:
    """
    Create a WindowsResource from CLI arguments, environment and configuration.

    Raises:
        EnvironmentMissingError: If required build values are missing
        ConfigError: If the configuration file is invalid
    """
    env = build_environment(args)
    config = load_config(args, env)
    return WindowsResource(env).apply_config(config)
