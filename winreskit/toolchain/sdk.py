"""
winreskit/toolchain/sdk.py

Windows SDK inventory - discovers SDK installations recorded in the registry.

The Windows Kits installer records its installation roots and the SDK versions
it installed under a single registry key. Each version lives side by side
under ``<root>/bin/<version>``, with per-architecture tool directories and a
shared ``Include/<version>`` tree.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import DiscoveryError, NoRootsFoundError

logger = logging.getLogger(__name__)

INSTALLED_ROOTS_KEY = (
    r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Windows Kits\Installed Roots"
)
KITS_ROOT_PREFIX = "KitsRoot"
REG_SZ_MARKER = "REG_SZ"


class Arch(Enum):
    """Target architecture of an SDK tool directory."""

    ARM = "arm"
    ARM64 = "arm64"
    X64 = "x64"
    X86 = "x86"

    @property
    def dirname(self) -> str:
        """Directory name used inside the SDK ``bin`` and ``Lib`` trees."""
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Arch":
        """
        Look up an architecture by directory name.

        Raises:
            ValueError: If the name is not a supported architecture
        """
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Unsupported architecture: {name}") from None

    def __str__(self) -> str:
        return self.value


# Architecture order for every SDK.
ALL_ARCHS = (Arch.ARM, Arch.ARM64, Arch.X86, Arch.X64)


@dataclass(frozen=True)
class InstalledRoot:
    """
    An installation root recorded in the registry.

    Attributes:
        name: Registry value name (e.g., 'KitsRoot10')
        path: Filesystem path of the root
    """

    name: str
    path: Path

    def __str__(self) -> str:
        return f"{self.name}={self.path}"


@dataclass
class InstalledRoots:
    """Parsed content of the installed roots registry key."""

    roots: List[InstalledRoot] = field(default_factory=list)
    sdk_versions: List[str] = field(default_factory=list)


@dataclass
class ArchToolset:
    """
    Tool and header locations of one SDK for one architecture.

    Attributes:
        bin_dir: Directory holding the architecture's executables
        include_dirs: Include category name (e.g., 'um', 'shared') to directory
        lib_dirs: Library category name (e.g., 'um', 'ucrt') to directory
    """

    bin_dir: Path
    include_dirs: Dict[str, Path] = field(default_factory=dict)
    lib_dirs: Dict[str, Path] = field(default_factory=dict)

    def has_tool(self, name: str) -> bool:
        return (self.bin_dir / name).exists()


@dataclass(frozen=True)
class ResolvedTool:
    """
    A single selected tool executable.

    Attributes:
        sdk_version: Version of the SDK providing the tool ('' outside an SDK)
        installed_root: Installation root providing the tool
        arch: Target architecture of the tool
        path: Absolute path to the executable
        bin_dir: Directory containing the executable
        include_dirs: Include directories inherited from the toolset
        lib_dirs: Library directories inherited from the toolset
    """

    sdk_version: str
    installed_root: Path
    arch: Optional[Arch]
    path: Path
    bin_dir: Path
    include_dirs: Dict[str, Path] = field(default_factory=dict)
    lib_dirs: Dict[str, Path] = field(default_factory=dict)

    def __str__(self) -> str:
        version = self.sdk_version or "unversioned"
        return f"{self.path.name} {version} ({self.arch}) at {self.path}"


class Sdk:
    """
    One SDK version installed under one installation root.

    Loading an Sdk checks every supported architecture; an architecture
    without a tool directory still gets a toolset, it just provides no tools.
    """

    def __init__(self, version: str, installed_root: Path):
        self.version = version
        self.installed_root = installed_root
        self.archs: Dict[Arch, ArchToolset] = {}
        self._load_archs()

    def __repr__(self) -> str:
        return f"Sdk(version={self.version!r}, installed_root={self.installed_root!r})"

    @staticmethod
    def exists(version: str, installed_root: Path) -> bool:
        """Check whether ``version`` is installed under ``installed_root``."""
        return (installed_root / "bin" / version).exists()

    @property
    def bin_root_dir(self) -> Path:
        return self.installed_root / "bin" / self.version

    @property
    def lib_root_dir(self) -> Path:
        return self.installed_root / "Lib" / self.version

    @property
    def include_root_dir(self) -> Path:
        return self.installed_root / "Include" / self.version

    def toolset(self, arch: Arch) -> Optional[ArchToolset]:
        return self.archs.get(arch)

    def has_tool(self, arch: Arch, name: str) -> bool:
        toolset = self.toolset(arch)
        return toolset is not None and toolset.has_tool(name)

    def tool(self, name: str, arch: Arch) -> Optional[ResolvedTool]:
        """
        Get a tool of this SDK.

        Args:
            name: Executable file name (e.g., 'rc.exe')
            arch: Target architecture

        Returns:
            ResolvedTool, or None if this SDK has no such tool for ``arch``
        """
        toolset = self.toolset(arch)
        if toolset is None or not toolset.has_tool(name):
            return None

        return ResolvedTool(
            sdk_version=self.version,
            installed_root=self.installed_root,
            arch=arch,
            path=toolset.bin_dir / name,
            bin_dir=toolset.bin_dir,
            include_dirs=dict(toolset.include_dirs),
            lib_dirs=dict(toolset.lib_dirs),
        )

    def _load_archs(self):
        # Headers are not architecture specific; list them once.
        include_dirs = self._list_dirs(self.include_root_dir)

        for arch in ALL_ARCHS:
            toolset = ArchToolset(
                bin_dir=self.bin_root_dir / arch.dirname,
                include_dirs=dict(include_dirs),
                lib_dirs=self._load_lib_dirs(arch),
            )
            if not toolset.bin_dir.exists():
                logger.debug(
                    f"SDK {self.version} has no {arch} tools at {toolset.bin_dir}"
                )
            self.archs[arch] = toolset

    def _load_lib_dirs(self, arch: Arch) -> Dict[str, Path]:
        lib_dirs = {}
        for category, path in self._list_dirs(self.lib_root_dir).items():
            arch_dir = path / arch.dirname
            if arch_dir.is_dir():
                lib_dirs[category] = arch_dir
        return lib_dirs

    @staticmethod
    def _list_dirs(root: Path) -> Dict[str, Path]:
        if not root.is_dir():
            logger.debug(f"SDK directory does not exist: {root}")
            return {}
        return {entry.name: entry for entry in sorted(root.iterdir()) if entry.is_dir()}


class RegistryReader(ABC):
    """Source of the raw text lines stored under a registry key."""

    @abstractmethod
    def read_lines(self, key: str) -> List[str]:
        """
        Read a registry key.

        Args:
            key: Full registry key path

        Returns:
            Output lines in ``reg query`` format
        """
        pass


class RegQueryReader(RegistryReader):
    """
    Read the registry with the ``reg`` command line tool.

    Querying the 32-bit view matches where the Windows Kits installer writes
    its roots on both 32-bit and 64-bit hosts.
    """

    def __init__(self, executable: str = "reg"):
        self.executable = executable

    def read_lines(self, key: str) -> List[str]:
        logger.debug(f"Querying registry key {key}")
        try:
            result = subprocess.run(
                [self.executable, "query", key, "/reg:32"],
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise DiscoveryError(f"Could not run {self.executable}: {e}") from e

        if result.returncode != 0:
            logger.debug(f"reg query returned {result.returncode}")

        return result.stdout.decode("utf-8", errors="replace").splitlines()


def parse_installed_roots(
    lines: List[str], key: str = INSTALLED_ROOTS_KEY
) -> InstalledRoots:
    """
    Parse ``reg query`` output of the installed roots key.

    Root lines look like ``KitsRoot10    REG_SZ    C:\\Program Files (x86)\\Windows Kits\\10\\``;
    version lines are sub-keys such as ``<key>\\10.0.17763.0``.
    Lines matching neither shape are skipped.

    Args:
        lines: Raw output lines
        key: Registry key that was queried

    Returns:
        Parsed roots and versions
    """
    parsed = InstalledRoots()

    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(KITS_ROOT_PREFIX):
            root = _parse_root_line(line)
            if root is not None:
                parsed.roots.append(root)
        elif line.startswith(key):
            version = line[len(key) + 1 :].strip()
            if version:
                parsed.sdk_versions.append(version)
        else:
            logger.debug(f"Ignoring registry line: {line}")

    return parsed


def _parse_root_line(line: str) -> Optional[InstalledRoot]:
    name = line.split(maxsplit=1)[0]
    marker = line.find(REG_SZ_MARKER)
    if marker < 0:
        logger.debug(f"Ignoring root line without {REG_SZ_MARKER}: {line}")
        return None

    path = line[marker + len(REG_SZ_MARKER) :].strip()
    if not path:
        logger.debug(f"Ignoring root line without a path: {line}")
        return None

    return InstalledRoot(name=name, path=Path(path))


class Inventory:
    """
    All SDKs installed on the host.

    Attributes:
        installed_roots: Roots and versions recorded in the registry
        sdks: SDKs found on disk, in registry order (root, then version)
    """

    def __init__(self, installed_roots: InstalledRoots, sdks: List[Sdk]):
        self.installed_roots = installed_roots
        self.sdks = sdks

    def __repr__(self) -> str:
        return f"Inventory(roots={self.root_paths}, sdks={self.sdks})"

    @property
    def root_paths(self) -> List[Path]:
        return [root.path for root in self.installed_roots.roots]

    @classmethod
    def from_installed_roots(cls, installed_roots: InstalledRoots) -> "Inventory":
        """
        Build the inventory from parsed registry content.

        Every (root, version) pair whose ``bin/<version>`` directory exists
        becomes an Sdk.
        """
        sdks = []
        for root in installed_roots.roots:
            for version in installed_roots.sdk_versions:
                if Sdk.exists(version, root.path):
                    sdks.append(Sdk(version, root.path))
                    logger.info(f"Found Windows SDK {version} in {root.path}")
                else:
                    logger.debug(f"SDK {version} not installed in {root.path}")
        return cls(installed_roots, sdks)

    def tools(self, name: str, arch: Arch) -> List[Tuple[Sdk, ResolvedTool]]:
        """All SDKs providing ``name`` for ``arch``, in inventory order."""
        found = []
        for sdk in self.sdks:
            tool = sdk.tool(name, arch)
            if tool is not None:
                found.append((sdk, tool))
        return found


def discover(
    reader: Optional[RegistryReader] = None, key: str = INSTALLED_ROOTS_KEY
) -> Inventory:
    """
    Discover installed Windows SDKs.

    Args:
        reader: Registry reader (defaults to querying with ``reg``)
        key: Registry key listing the installation roots

    Returns:
        Inventory of installed SDKs

    Raises:
        NoRootsFoundError: If the registry lists no installation root
    """
    reader = reader or RegQueryReader()
    installed_roots = parse_installed_roots(reader.read_lines(key), key)

    if not installed_roots.roots:
        raise NoRootsFoundError(key)

    logger.debug(
        f"Registry lists {len(installed_roots.roots)} roots and "
        f"{len(installed_roots.sdk_versions)} SDK versions"
    )
    return Inventory.from_installed_roots(installed_roots)
