"""
Tool selection across side-by-side SDK installations.

Several SDK versions usually coexist on a build host. Selection is:

1. An exact version pin (``WindowsSDKVersion``) wins if any SDK provides
   the tool at that version.
2. Otherwise the numerically greatest SDK version providing the tool.

The pin must always win over the maximum so hosts can reproduce a build
against a specific SDK release.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from packaging.version import InvalidVersion, Version

from ..core.exceptions import ToolNotFoundError
from .sdk import Arch, Inventory, ResolvedTool

logger = logging.getLogger(__name__)

RC_TOOL = "rc.exe"


def version_key(version: str) -> Tuple[int, Tuple[int, ...]]:
    """
    Sort key comparing SDK versions numerically, component by component.

    ``10.0.9200.0`` sorts before ``10.0.10240.0``. Strings that are not valid
    versions sort below every valid one.

    Args:
        version: Dot-separated version string

    Returns:
        Sortable key
    """
    try:
        return (1, Version(version).release)
    except InvalidVersion:
        logger.debug(f"Unparsable SDK version: {version}")
        return (0, ())


def resolve(
    inventory: Inventory,
    tool_name: str,
    arch: Arch,
    preferred_version: Optional[str] = None,
) -> ResolvedTool:
    """
    Select exactly one tool from the inventory.

    Args:
        inventory: Discovered SDKs
        tool_name: Executable name (e.g., 'rc.exe')
        arch: Target architecture
        preferred_version: Exact SDK version to use when available

    Returns:
        The selected tool

    Raises:
        ToolNotFoundError: If no SDK provides the tool for ``arch``
    """
    candidates = [tool for _sdk, tool in inventory.tools(tool_name, arch)]

    if not candidates:
        raise ToolNotFoundError(tool_name, arch, inventory.root_paths)

    if preferred_version:
        for tool in candidates:
            if tool.sdk_version == preferred_version:
                logger.info(f"Using pinned SDK {preferred_version}: {tool.path}")
                return tool
        logger.debug(
            f"Pinned SDK {preferred_version} does not provide {tool_name} for {arch}"
        )

    tool = max(
        candidates,
        key=lambda t: (version_key(t.sdk_version), str(t.installed_root)),
    )
    logger.info(f"Using newest SDK {tool.sdk_version}: {tool.path}")
    return tool


def resolve_on_path(
    name: str,
    explicit_path: Optional[str] = None,
    search_dirs: Optional[List[Path]] = None,
) -> ResolvedTool:
    """
    Resolve a tool outside the SDK inventory (GNU toolchain).

    An explicit path is used as is; otherwise ``search_dirs`` and then
    ``PATH`` are searched. A tool that cannot be found is still returned by
    bare name so the process launcher reports the failure.

    Args:
        name: Executable name (e.g., 'windres.exe')
        explicit_path: Path configured by the user
        search_dirs: Directories to search before ``PATH``

    Returns:
        ResolvedTool without SDK version or include directories
    """
    if explicit_path:
        path = Path(explicit_path)
        found = shutil.which(explicit_path)
        if found:
            path = Path(found)
    else:
        found = None
        for directory in search_dirs or []:
            found = shutil.which(name, path=str(directory))
            if found:
                break
        if not found:
            found = shutil.which(name)
        path = Path(found) if found else Path(name)

    if path.parent == Path("."):
        logger.debug(f"{name} not found, relying on the process search path")
        bin_dir = Path.cwd()
    else:
        # Tools run with their own directory as cwd.
        path = path.absolute()
        bin_dir = path.parent

    return ResolvedTool(
        sdk_version="",
        installed_root=bin_dir,
        arch=None,
        path=path,
        bin_dir=bin_dir,
    )
