"""
Target detection for winreskit.

Determines which resource compiler family (``msvc`` or ``gnu``) and which
processor architecture a build targets. The build system's target
configuration takes precedence; the host platform is the fallback.

Usage:
    from winreskit.core.environment import OsEnvironment
    from winreskit.core.platform import detect_target

    target = detect_target(OsEnvironment())
    print(f"Family: {target.family}, arch: {target.arch}")
"""

import functools
import logging
import platform
from dataclasses import dataclass
from typing import Optional

from .environment import (
    EnvironmentSource,
    TARGET_ARCH,
    TARGET_ENV,
    TOOLCHAIN_OVERRIDE,
)

logger = logging.getLogger(__name__)

FAMILY_MSVC = "msvc"
FAMILY_GNU = "gnu"
SUPPORTED_FAMILIES = (FAMILY_MSVC, FAMILY_GNU)

SUPPORTED_ARCHS = ("arm", "arm64", "x64", "x86")


@dataclass(frozen=True)
class TargetInfo:
    """
    Build target information.

    Attributes:
        os: Host operating system ('windows', 'linux', 'macos', ...)
        family: Toolchain family ('msvc', 'gnu') or None if unsupported
        arch: Architecture ('arm', 'arm64', 'x64', 'x86') or None if unsupported
    """

    os: str
    family: Optional[str]
    arch: Optional[str]

    def __str__(self) -> str:
        return f"{self.family or 'unsupported'}-{self.arch or 'unknown'} on {self.os}"


def detect_target(env: EnvironmentSource) -> TargetInfo:
    """
    Detect the toolchain family and architecture of the current build.

    Args:
        env: Environment source holding the build system's target settings

    Returns:
        TargetInfo for this build
    """
    host_os = detect_host_os()
    family = detect_family(env, host_os)

    target_arch = env.get(TARGET_ARCH)
    if target_arch:
        arch = normalize_architecture(target_arch)
    else:
        arch = normalize_architecture(platform.machine())

    info = TargetInfo(os=host_os, family=family, arch=arch)
    logger.debug(f"Detected target: {info}")
    return info


def detect_family(env: EnvironmentSource, host_os: str) -> Optional[str]:
    """
    Detect the resource compiler family.

    Order: explicit ``WINRESKIT_TOOLCHAIN`` override, then the build
    system's target environment, then ``msvc`` on Windows hosts.

    Returns:
        'msvc', 'gnu', or None if no supported family applies
    """
    override = env.get(TOOLCHAIN_OVERRIDE)
    if override:
        override = override.strip().lower()
        return override if override in SUPPORTED_FAMILIES else None

    target_env = env.get(TARGET_ENV)
    if target_env is not None:
        target_env = target_env.strip().lower()
        return target_env if target_env in SUPPORTED_FAMILIES else None

    if host_os == "windows":
        return FAMILY_MSVC

    return None


@functools.lru_cache(maxsize=1)
def detect_host_os() -> str:
    """
    Detect host operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the raw lowercase name
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "macos"
    elif system.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    return system


def normalize_architecture(machine: str) -> Optional[str]:
    """
    Normalize an architecture name.

    Accepts host machine names (``AMD64``, ``x86_64``) and target triple
    architectures (``aarch64``, ``i686``, ``thumbv7a``).

    Returns:
        'arm', 'arm64', 'x64', 'x86', or None for anything else
    """
    machine = machine.strip().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i586", "i686", "x86"):
        return "x86"
    elif machine.startswith(("arm", "thumb")):
        return "arm"
    return None


def clear_platform_cache():
    """Clear the host OS detection cache."""
    detect_host_os.cache_clear()


__all__ = [
    "FAMILY_MSVC",
    "FAMILY_GNU",
    "SUPPORTED_FAMILIES",
    "SUPPORTED_ARCHS",
    "TargetInfo",
    "detect_target",
    "detect_family",
    "detect_host_os",
    "normalize_architecture",
    "clear_platform_cache",
]
