"""
Resource descriptor model, rendering, and the build facade.
"""

from winreskit.resource.descriptor import (
    Descriptor,
    VersionInfo,
    pack_version,
    unpack_version,
)
from winreskit.resource.serializer import (
    escape_string,
    unescape_string,
    render,
    write_resource_file,
)
from winreskit.resource.metadata import load_metadata, extract_overrides
from winreskit.resource.builder import WindowsResource

__all__ = [
    "Descriptor",
    "VersionInfo",
    "pack_version",
    "unpack_version",
    "escape_string",
    "unescape_string",
    "render",
    "write_resource_file",
    "load_metadata",
    "extract_overrides",
    "WindowsResource",
]
