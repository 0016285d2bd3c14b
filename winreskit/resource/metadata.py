"""
Project metadata overrides for the version string table.

Projects can override string properties in their manifest:

    # Cargo.toml
    [package.metadata.winres]
    OriginalFilename = "testing.exe"
    FileDescription = "⛄❤☕"
    LegalCopyright = "Copyright © 2016"

Everything here is best effort: a missing file or section means no
overrides, and entries that are not strings are skipped with a warning.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

MANIFEST_FILE = "Cargo.toml"
METADATA_SECTION = ("package", "metadata", "winres")


def load_metadata(project_root: Path) -> Dict[str, str]:
    """
    Load string property overrides from the project manifest.

    Args:
        project_root: Directory containing the project manifest

    Returns:
        Property name to value (empty if nothing is configured)

    Raises:
        OSError: If the manifest exists but cannot be read
    """
    manifest = project_root / MANIFEST_FILE
    if not manifest.exists():
        logger.debug(f"Project manifest not found: {manifest}")
        return {}

    with open(manifest, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.warning(f"TOML parsing error in {manifest}: {e}")
            return {}

    return extract_overrides(data)


def extract_overrides(data: Dict[str, Any]) -> Dict[str, str]:
    """
    Extract string overrides from a parsed project manifest.

    Args:
        data: Parsed manifest

    Returns:
        Property name to value
    """
    section: Any = data
    path = []
    for key in METADATA_SECTION:
        path.append(key)
        if not isinstance(section, dict) or key not in section:
            logger.debug(f"{'.'.join(path)} does not exist")
            return {}
        section = section[key]

    if not isinstance(section, dict):
        logger.warning(f"{'.'.join(METADATA_SECTION)} is not a table")
        return {}

    overrides = {}
    for key, value in section.items():
        if isinstance(value, str):
            overrides[key] = value
        else:
            logger.warning(f"{'.'.join(METADATA_SECTION)}.{key} is not a string")
    return overrides
