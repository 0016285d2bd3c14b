"""
Host environment access for winreskit.

The build system hands its configuration to the resource step through
environment variables. Core logic never reads ``os.environ`` directly; it
receives an :class:`EnvironmentSource` so it can be driven from tests with
plain dictionaries.

Usage:
    from winreskit.core.environment import OsEnvironment, DictEnvironment

    env = OsEnvironment()
    out_dir = env.get("OUT_DIR", ".")

    env = DictEnvironment({"CARGO_PKG_NAME": "demo"})
    name = env.require("CARGO_PKG_NAME")
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import EnvironmentMissingError


# Package metadata
PKG_NAME = "CARGO_PKG_NAME"
PKG_VERSION = "CARGO_PKG_VERSION"
PKG_DESCRIPTION = "CARGO_PKG_DESCRIPTION"
PKG_VERSION_MAJOR = "CARGO_PKG_VERSION_MAJOR"
PKG_VERSION_MINOR = "CARGO_PKG_VERSION_MINOR"
PKG_VERSION_PATCH = "CARGO_PKG_VERSION_PATCH"

# Build layout
OUT_DIR = "OUT_DIR"
MANIFEST_DIR = "CARGO_MANIFEST_DIR"

# Toolchain selection
SDK_VERSION = "WindowsSDKVersion"
TARGET_ENV = "CARGO_CFG_TARGET_ENV"
TARGET_ARCH = "CARGO_CFG_TARGET_ARCH"
TOOLCHAIN_OVERRIDE = "WINRESKIT_TOOLCHAIN"


class EnvironmentSource(ABC):
    """Read-only lookup of host-provided values."""

    @abstractmethod
    def lookup(self, key: str) -> Optional[str]:
        """
        Look up a value.

        Args:
            key: Variable name

        Returns:
            The value, or None if unset
        """
        pass

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.lookup(key)
        return default if value is None else value

    def require(self, key: str) -> str:
        """
        Look up a value that must be present.

        Raises:
            EnvironmentMissingError: If the value is unset
        """
        value = self.lookup(key)
        if value is None:
            raise EnvironmentMissingError(key)
        return value


class OsEnvironment(EnvironmentSource):
    """Environment source backed by the process environment."""

    def lookup(self, key: str) -> Optional[str]:
        return os.environ.get(key)


class DictEnvironment(EnvironmentSource):
    """Environment source backed by a mapping."""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self.values = dict(values or {})

    def lookup(self, key: str) -> Optional[str]:
        return self.values.get(key)


def preferred_sdk_version(env: EnvironmentSource) -> Optional[str]:
    """
    Get the pinned SDK version, if any.

    Developer command prompts export ``WindowsSDKVersion`` with a trailing
    backslash (``10.0.17763.0\\``), which is stripped here.
    """
    value = env.get(SDK_VERSION)
    if value is None:
        return None
    value = value.strip().rstrip("\\/")
    return value or None


def project_root(env: EnvironmentSource) -> Path:
    """Project root directory provided by the build system."""
    return Path(env.require(MANIFEST_DIR))


def output_directory(env: EnvironmentSource) -> Path:
    """Output directory provided by the build system (``.`` if unset)."""
    return Path(env.get(OUT_DIR, "."))
