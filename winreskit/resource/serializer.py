"""
Resource script (``.rc``) rendering.

Output is byte-for-byte reproducible: version fields follow the fixed
:class:`VersionInfo` order and string properties are sorted by name.
"""

import logging
from pathlib import Path
from typing import List

from ..core.exceptions import SerializationIoError
from .descriptor import Descriptor, VersionInfo, unpack_version

logger = logging.getLogger(__name__)

UTF8_CODE_PAGE = 65001
UNICODE_CODE_PAGE = "04b0"
MANIFEST_RESOURCE_TYPE = 24
DEFAULT_ICON_ID = "1"

# In quoted RC strings a double quote is escaped by doubling it; everything
# else uses C-style backslash escapes.
_ESCAPES = {
    '"': '""',
    "'": "\\'",
    "\\": "\\\\",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}
_UNESCAPES = {"'": "'", "\\": "\\", "n": "\n", "t": "\t", "r": "\r"}


def escape_string(value: str) -> str:
    """Escape a string for use inside a quoted RC string literal."""
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def unescape_string(value: str) -> str:
    """
    Reverse :func:`escape_string`.

    Raises:
        ValueError: If ``value`` holds an escape sequence escape_string never produces
    """
    chars = []
    i = 0
    while i < len(value):
        ch = value[i]
        nxt = value[i + 1] if i + 1 < len(value) else ""
        if ch == '"' and nxt == '"':
            chars.append('"')
            i += 2
        elif ch == "\\" and nxt in _UNESCAPES:
            chars.append(_UNESCAPES[nxt])
            i += 2
        elif ch in ('"', "\\"):
            raise ValueError(f"Invalid escape at offset {i}: {value!r}")
        else:
            chars.append(ch)
            i += 1
    return "".join(chars)


def render(descriptor: Descriptor) -> str:
    """
    Render a descriptor as resource script text.

    Args:
        descriptor: Resource attributes

    Returns:
        Resource script, newline terminated
    """
    lines: List[str] = []

    # The descriptor holds str values, so tell rc to read the file as UTF-8.
    lines.append(f"#pragma code_page({UTF8_CODE_PAGE})")
    lines.append("1 VERSIONINFO")
    for field_name in VersionInfo:
        if field_name not in descriptor.version_info:
            continue
        value = descriptor.version_info[field_name]
        if field_name.is_version:
            words = ", ".join(str(w) for w in unpack_version(value))
            lines.append(f"{field_name.value} {words}")
        else:
            lines.append(f"{field_name.value} {value:#x}")

    lines.append("{")
    lines.append('BLOCK "StringFileInfo"')
    lines.append("{")
    lines.append(f'BLOCK "{descriptor.language:04x}{UNICODE_CODE_PAGE}"')
    lines.append("{")
    for name in sorted(descriptor.properties):
        value = descriptor.properties[name]
        if value:
            lines.append(f'VALUE "{escape_string(name)}", "{escape_string(value)}"')
    lines.append("}")
    lines.append("}")

    lines.append('BLOCK "VarFileInfo" {')
    lines.append(
        f'VALUE "Translation", {descriptor.language:#x}, 0x{UNICODE_CODE_PAGE}'
    )
    lines.append("}")
    lines.append("}")

    if descriptor.icon is not None:
        icon_id = descriptor.icon_id or DEFAULT_ICON_ID
        lines.append(
            f'{escape_string(icon_id)} ICON "{escape_string(descriptor.icon)}"'
        )

    lines.extend(_render_manifest(descriptor))

    return "\n".join(lines) + "\n"


def _render_manifest(descriptor: Descriptor) -> List[str]:
    # The manifest resource id is the FILETYPE value: 1 for an EXE, 2 for a DLL.
    file_type = descriptor.version_info.get(VersionInfo.FILETYPE)
    if file_type is None:
        return []

    if descriptor.manifest is not None:
        lines = [f"{file_type} {MANIFEST_RESOURCE_TYPE}", "{"]
        for line in descriptor.manifest.splitlines():
            lines.append(f'"{escape_string(line.strip())}"')
        lines.append("}")
        return lines

    if descriptor.manifest_file is not None:
        return [
            f'{file_type} {MANIFEST_RESOURCE_TYPE} "{escape_string(descriptor.manifest_file)}"'
        ]

    return []


def write_resource_file(descriptor: Descriptor, path: Path) -> Path:
    """
    Write the rendered descriptor to ``path``.

    Args:
        descriptor: Resource attributes
        path: Destination file

    Returns:
        The written path

    Raises:
        SerializationIoError: If the file cannot be written
    """
    text = render(descriptor)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
    except OSError as e:
        raise SerializationIoError(path, str(e)) from e

    logger.debug(f"Wrote resource file {path}")
    return path
