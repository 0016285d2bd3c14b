"""
Core functionality for winreskit.

This package contains the foundational modules that other components depend on.
"""

from .environment import (
    EnvironmentSource,
    OsEnvironment,
    DictEnvironment,
    preferred_sdk_version,
    project_root,
    output_directory,
)

from .platform import (
    TargetInfo,
    detect_target,
    detect_family,
    normalize_architecture,
    clear_platform_cache,
    FAMILY_MSVC,
    FAMILY_GNU,
)

from .exceptions import (
    WinResKitError,
    EnvironmentMissingError,
    ConfigError,
    DiscoveryError,
    NoRootsFoundError,
    ResolutionError,
    ToolNotFoundError,
    SerializationIoError,
    EncodingError,
    CompileError,
    SubprocessFailedError,
    UnsupportedToolchainError,
)

__all__ = [
    # Environment
    "EnvironmentSource",
    "OsEnvironment",
    "DictEnvironment",
    "preferred_sdk_version",
    "project_root",
    "output_directory",
    # Platform
    "TargetInfo",
    "detect_target",
    "detect_family",
    "normalize_architecture",
    "clear_platform_cache",
    "FAMILY_MSVC",
    "FAMILY_GNU",
    # Exceptions
    "WinResKitError",
    "EnvironmentMissingError",
    "ConfigError",
    "DiscoveryError",
    "NoRootsFoundError",
    "ResolutionError",
    "ToolNotFoundError",
    "SerializationIoError",
    "EncodingError",
    "CompileError",
    "SubprocessFailedError",
    "UnsupportedToolchainError",
]
