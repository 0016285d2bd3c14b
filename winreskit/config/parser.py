"""YAML configuration parser for winreskit.

This module provides parsing and validation for ``winreskit.yaml`` files.
Every setting is optional; unset values keep the defaults derived from the
build environment.

Example:

    toolchain: msvc
    arch: x64
    sdk_version: 10.0.17763.0
    language: 0x0409
    icon: assets/app.ico
    manifest_file: app.manifest
    properties:
      CompanyName: Example Corp
      LegalCopyright: Copyright (c) 2024
    version_info:
      FILEVERSION: 1.2.3.4
      FILETYPE: 0x2
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import ConfigError
from ..core.platform import SUPPORTED_ARCHS, SUPPORTED_FAMILIES
from ..resource.descriptor import VersionInfo, pack_version

logger = logging.getLogger(__name__)

CONFIG_FILE = "winreskit.yaml"

_STRING_FIELDS = (
    "output_directory",
    "sdk_version",
    "windres_path",
    "ar_path",
    "icon",
    "icon_id",
    "manifest",
    "manifest_file",
    "resource_file",
)


@dataclass
class ResourceConfig:
    """Complete winreskit configuration."""

    toolchain: Optional[str] = None  # 'msvc', 'gnu'
    arch: Optional[str] = None  # 'arm', 'arm64', 'x64', 'x86'
    sdk_version: Optional[str] = None
    output_directory: Optional[str] = None
    windres_path: Optional[str] = None
    ar_path: Optional[str] = None
    language: Optional[int] = None
    icon: Optional[str] = None
    icon_id: Optional[str] = None
    manifest: Optional[str] = None
    manifest_file: Optional[str] = None
    resource_file: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)
    version_info: Dict[VersionInfo, int] = field(default_factory=dict)


def find_config(project_root: Path) -> Optional[Path]:
    """Locate the default configuration file of a project, if present."""
    candidate = project_root / CONFIG_FILE
    return candidate if candidate.exists() else None


def parse_config(config_path: Path) -> ResourceConfig:
    """
    Parse a winreskit.yaml configuration file.

    Args:
        config_path: Path to winreskit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        logger.debug(f"Configuration file is empty: {config_path}")
        return ResourceConfig()

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def _parse_and_validate(data: dict) -> ResourceConfig:
    """Parse and validate configuration data."""
    known = set(_STRING_FIELDS) | {
        "toolchain",
        "arch",
        "language",
        "properties",
        "version_info",
    }
    for key in data:
        if key not in known:
            logger.warning(f"Ignoring unknown configuration key: {key}")

    config = ResourceConfig()

    for name in _STRING_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ConfigError(f"{name} must be a string")
        setattr(config, name, str(value))

    if config.manifest is not None and config.manifest_file is not None:
        raise ConfigError("Only one of manifest and manifest_file may be set")

    toolchain = data.get("toolchain")
    if toolchain is not None:
        if toolchain not in SUPPORTED_FAMILIES:
            raise ConfigError(
                f"Invalid toolchain: {toolchain} (expected one of {list(SUPPORTED_FAMILIES)})"
            )
        config.toolchain = toolchain

    arch = data.get("arch")
    if arch is not None:
        if arch not in SUPPORTED_ARCHS:
            raise ConfigError(
                f"Invalid arch: {arch} (expected one of {list(SUPPORTED_ARCHS)})"
            )
        config.arch = arch

    language = data.get("language")
    if language is not None:
        if not isinstance(language, int) or isinstance(language, bool):
            raise ConfigError("language must be an integer")
        if not 0 <= language <= 0xFFFF:
            raise ConfigError(f"language out of range: {language:#x}")
        config.language = language

    config.properties = _parse_properties(data.get("properties", {}))
    config.version_info = _parse_version_info(data.get("version_info", {}))

    return config


def _parse_properties(data: Any) -> Dict[str, str]:
    """Parse string table overrides."""
    if not isinstance(data, dict):
        raise ConfigError("properties must be a dictionary")

    properties = {}
    for name, value in data.items():
        if value is None:
            value = ""
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ConfigError(f"properties.{name} must be a string")
        properties[str(name)] = str(value)
    return properties


def _parse_version_info(data: Any) -> Dict[VersionInfo, int]:
    """Parse numeric version info fields."""
    if not isinstance(data, dict):
        raise ConfigError("version_info must be a dictionary")

    version_info = {}
    for name, value in data.items():
        try:
            field_name = VersionInfo.from_name(str(name))
        except ValueError as e:
            raise ConfigError(str(e))

        if isinstance(value, str) and field_name.is_version:
            version_info[field_name] = _parse_dotted_version(name, value)
        elif isinstance(value, int) and not isinstance(value, bool):
            if not 0 <= value <= 0xFFFF_FFFF_FFFF_FFFF:
                raise ConfigError(f"version_info.{name} out of range")
            version_info[field_name] = value
        else:
            raise ConfigError(f"version_info.{name} must be an integer")
    return version_info


def _parse_dotted_version(name: str, value: str) -> int:
    """Parse 'major.minor[.patch[.release]]' into the packed layout."""
    parts = value.strip().split(".")
    if not 1 <= len(parts) <= 4:
        raise ConfigError(f"version_info.{name}: invalid version {value!r}")
    try:
        words = [int(p) for p in parts] + [0] * (4 - len(parts))
        return pack_version(*words)
    except ValueError:
        raise ConfigError(f"version_info.{name}: invalid version {value!r}")
