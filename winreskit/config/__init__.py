"""
Configuration file support for winreskit.
"""

from .parser import ResourceConfig, parse_config, find_config, CONFIG_FILE

__all__ = ["ResourceConfig", "parse_config", "find_config", "CONFIG_FILE"]
