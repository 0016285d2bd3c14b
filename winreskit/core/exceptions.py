"""
Centralized exception hierarchy for winreskit.

Every failure in the resource pipeline is fatal for the build step, so all
errors propagate to the single top-level caller. The hierarchy mirrors the
pipeline stages: environment, discovery, resolution, serialization, compile.
"""

from pathlib import Path
from typing import Iterable, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class WinResKitError(Exception):
    """Base exception for all winreskit errors."""

    pass


# ============================================================================
# Environment Exceptions
# ============================================================================


class EnvironmentMissingError(WinResKitError):
    """Raised when a required host-provided value is absent."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Required environment value is not set: {key}")


class ConfigError(WinResKitError):
    """Configuration file parsing or validation error."""

    pass


# ============================================================================
# Discovery / Resolution Exceptions
# ============================================================================


class DiscoveryError(WinResKitError):
    """Base exception for toolchain discovery errors."""

    pass


class NoRootsFoundError(DiscoveryError):
    """Raised when the installation registry yields no installation roots."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No installed root found under {key}")


class ResolutionError(WinResKitError):
    """Base exception for tool resolution errors."""

    pass


class ToolNotFoundError(ResolutionError):
    """Raised when no installed SDK provides the requested tool."""

    def __init__(self, tool_name: str, arch, searched_roots: Iterable[Path]):
        self.tool_name = tool_name
        self.arch = arch
        self.searched_roots = list(searched_roots)
        roots = ", ".join(str(r) for r in self.searched_roots) or "<none>"
        super().__init__(
            f"No {tool_name} tool found for arch {arch} in installed roots: {roots}"
        )


# ============================================================================
# Serialization Exceptions
# ============================================================================


class SerializationIoError(WinResKitError):
    """Raised when the resource descriptor file cannot be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Could not write resource file {path}: {reason}")


class EncodingError(WinResKitError):
    """Raised when a path cannot be represented in the expected encoding."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Path is not representable as UTF-8: {value!r}")


# ============================================================================
# Compile Exceptions
# ============================================================================


class CompileError(WinResKitError):
    """Base exception for resource compilation errors."""

    pass


class SubprocessFailedError(CompileError):
    """Raised when the resource compiler or archiver exits with non-zero status."""

    def __init__(
        self,
        stage: str,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.stage = stage
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

        msg = f"{stage} failed"
        if returncode is not None:
            msg += f" with exit code {returncode}"
        if stdout.strip():
            msg += f"\nstdout:\n{stdout.rstrip()}"
        if stderr.strip():
            msg += f"\nstderr:\n{stderr.rstrip()}"
        super().__init__(msg)


class UnsupportedToolchainError(CompileError):
    """Raised when compiling under a toolchain family without a resource compiler."""

    def __init__(self, family: Optional[str]):
        self.family = family
        super().__init__(
            f"Can only compile resource files for the 'msvc' or 'gnu' "
            f"toolchain families, not {family!r}"
        )


__all__ = [
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
