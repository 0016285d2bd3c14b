"""
In-memory model of a Windows resource file.

A :class:`Descriptor` holds the VERSIONINFO resource (numeric fields and the
string table), an optional icon, an optional application manifest and the
language of the resource.

Version fields use the packed 64-bit layout of the VERSIONINFO statement:

    MAJOR << 48 | MINOR << 32 | PATCH << 16 | RELEASE

Example:
    >>> d = Descriptor()
    >>> d.set("InternalName", "TEST.EXE")
    >>> d.set_version_info(VersionInfo.PRODUCTVERSION, pack_version(1, 0, 0))
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from ..core.environment import (
    EnvironmentSource,
    PKG_DESCRIPTION,
    PKG_NAME,
    PKG_VERSION,
    PKG_VERSION_MAJOR,
    PKG_VERSION_MINOR,
    PKG_VERSION_PATCH,
)

logger = logging.getLogger(__name__)

WORD_MAX = 0xFFFF
QWORD_MAX = 0xFFFF_FFFF_FFFF_FFFF

VOS_NT_WINDOWS32 = 0x00040004
VFT_APP = 0x1
VFT_DLL = 0x2
VFT2_UNKNOWN = 0x0
VS_FFI_FILEFLAGSMASK = 0x3F


class VersionInfo(Enum):
    """
    Numeric VERSIONINFO fields.

    Declaration order is the order fields are written to the resource file.
    """

    FILEVERSION = "FILEVERSION"
    PRODUCTVERSION = "PRODUCTVERSION"
    FILEOS = "FILEOS"
    FILETYPE = "FILETYPE"
    FILESUBTYPE = "FILESUBTYPE"
    FILEFLAGSMASK = "FILEFLAGSMASK"
    FILEFLAGS = "FILEFLAGS"

    @property
    def is_version(self) -> bool:
        """True for the fields holding four 16-bit version words."""
        return self in (VersionInfo.FILEVERSION, VersionInfo.PRODUCTVERSION)

    @classmethod
    def from_name(cls, name: str) -> "VersionInfo":
        try:
            return cls(name.upper())
        except ValueError:
            raise ValueError(f"Unknown version info field: {name}") from None


def pack_version(major: int, minor: int, patch: int, release: int = 0) -> int:
    """
    Pack four version words into the 64-bit VERSIONINFO layout.

    Raises:
        ValueError: If a component is outside 0..65535
    """
    words = (major, minor, patch, release)
    for word in words:
        if not 0 <= word <= WORD_MAX:
            raise ValueError(f"Version component out of range: {word}")
    return major << 48 | minor << 32 | patch << 16 | release


def unpack_version(value: int) -> Tuple[int, int, int, int]:
    """Split a packed 64-bit version into its four 16-bit words, most significant first."""
    return (
        (value >> 48) & WORD_MAX,
        (value >> 32) & WORD_MAX,
        (value >> 16) & WORD_MAX,
        value & WORD_MAX,
    )


def _parse_word(value: Optional[str]) -> int:
    try:
        word = int(value or "")
    except ValueError:
        return 0
    return word if 0 <= word <= WORD_MAX else 0


@dataclass
class Descriptor:
    """
    Resource attributes prior to serialization.

    Attributes:
        properties: String table entries (e.g., 'ProductName')
        version_info: Numeric VERSIONINFO fields
        icon: Icon file path
        icon_id: Resource name or id of the icon (``1`` when unset)
        language: Language identifier (e.g., 0x0409 for English (US))
        manifest: Inline application manifest
        manifest_file: Path of an application manifest file
    """

    properties: Dict[str, str] = field(default_factory=dict)
    version_info: Dict[VersionInfo, int] = field(default_factory=dict)
    icon: Optional[str] = None
    icon_id: Optional[str] = None
    language: int = 0
    manifest: Optional[str] = None
    manifest_file: Optional[str] = None

    @classmethod
    def from_environment(
        cls,
        env: EnvironmentSource,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> "Descriptor":
        """
        Create a descriptor seeded from the build system's package values.

        | Field / property   | Value                            |
        |--------------------|----------------------------------|
        | `FileVersion`      | package version                  |
        | `ProductVersion`   | package version                  |
        | `ProductName`      | package name                     |
        | `FileDescription`  | package description              |
        | `FILEVERSION`      | packed package version           |
        | `PRODUCTVERSION`   | packed package version           |
        | `FILEOS`           | `VOS_NT_WINDOWS32 (0x40004)`     |
        | `FILETYPE`         | `VFT_APP (0x1)`                  |
        | `FILESUBTYPE`      | `VFT2_UNKNOWN (0x0)`             |
        | `FILEFLAGSMASK`    | `VS_FFI_FILEFLAGSMASK (0x3F)`    |
        | `FILEFLAGS`        | `0x0`                            |

        Args:
            env: Environment source with the package values
            metadata: Project metadata entries overriding string properties

        Raises:
            EnvironmentMissingError: If a package value is not set
        """
        version = env.require(PKG_VERSION)
        descriptor = cls()
        descriptor.properties = {
            "FileVersion": version,
            "ProductVersion": version,
            "ProductName": env.require(PKG_NAME),
            "FileDescription": env.require(PKG_DESCRIPTION),
        }
        descriptor.properties.update(metadata or {})

        packed = pack_version(
            _parse_word(env.require(PKG_VERSION_MAJOR)),
            _parse_word(env.require(PKG_VERSION_MINOR)),
            _parse_word(env.require(PKG_VERSION_PATCH)),
        )
        descriptor.version_info = {
            VersionInfo.FILEVERSION: packed,
            VersionInfo.PRODUCTVERSION: packed,
            VersionInfo.FILEOS: VOS_NT_WINDOWS32,
            VersionInfo.FILETYPE: VFT_APP,
            VersionInfo.FILESUBTYPE: VFT2_UNKNOWN,
            VersionInfo.FILEFLAGSMASK: VS_FFI_FILEFLAGSMASK,
            VersionInfo.FILEFLAGS: 0,
        }
        return descriptor

    def set(self, name: str, value: str) -> "Descriptor":
        """
        Set a string property of the version info struct.

        Well-known names are ``FileVersion``, ``FileDescription``,
        ``ProductVersion``, ``ProductName``, ``OriginalFilename``,
        ``LegalCopyright``, ``LegalTrademark``, ``CompanyName``, ``Comments``
        and ``InternalName``; ``PrivateBuild`` and ``SpecialBuild`` go with
        the matching ``FILEFLAGS`` bits. Other names are written too, but
        Windows Explorer will not show them.
        """
        self.properties[name] = value
        return self

    def set_language(self, language: int) -> "Descriptor":
        """Set the language identifier (0 is language neutral)."""
        if not 0 <= language <= WORD_MAX:
            raise ValueError(f"Language id out of range: {language:#x}")
        self.language = language
        return self

    def set_icon(self, path: str) -> "Descriptor":
        """Set the icon file; it is bound to resource id ``1``."""
        self.icon = path
        return self

    def set_icon_with_id(self, path: str, icon_id: str) -> "Descriptor":
        self.icon = path
        self.icon_id = icon_id
        return self

    def set_version_info(self, field_name: VersionInfo, value: int) -> "Descriptor":
        if not 0 <= value <= QWORD_MAX:
            raise ValueError(f"{field_name.value} value out of range: {value:#x}")
        self.version_info[field_name] = value
        return self

    def set_manifest(self, manifest: str) -> "Descriptor":
        """Embed manifest text; replaces any manifest file set before."""
        self.manifest_file = None
        self.manifest = manifest
        return self

    def set_manifest_file(self, path: str) -> "Descriptor":
        """Reference a manifest file; replaces any inline manifest set before."""
        self.manifest = None
        self.manifest_file = path
        return self
