"""
Resource compiler driver.

Turns a resource script into a linkable artifact and tells the build system
how to link it. One strategy exists per toolchain family:

- ``gnu``: ``windres`` compiles to an object file, ``ar`` wraps it in a
  static archive (``libresource.a``).
- ``msvc``: ``rc.exe`` compiles straight to ``resource.lib``.

Link directives are written to stdout, one per line:

    cargo:rustc-link-search=native=<output dir>
    cargo:rustc-link-lib=<static|dylib>=resource
"""

import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, TextIO

from ..core.exceptions import (
    EncodingError,
    SubprocessFailedError,
    UnsupportedToolchainError,
)
from ..core.platform import FAMILY_GNU, FAMILY_MSVC
from ..toolchain.resolver import resolve_on_path
from ..toolchain.sdk import ResolvedTool
from .invoker import ExitOutcome, SubprocessInvoker, ToolInvoker

logger = logging.getLogger(__name__)

RESOURCE_LIB_NAME = "resource"
WINDRES_TOOL = "windres"
AR_TOOL = "ar"


def encode_path(path: Path) -> str:
    """
    Convert a path to a command line string.

    Raises:
        EncodingError: If the path is not representable as UTF-8
    """
    value = str(path)
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise EncodingError(value) from None
    return value


class LinkDirectiveWriter:
    """Writes link instructions for the surrounding build system."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _emit(self, line: str):
        stream = self.stream or sys.stdout
        print(line, file=stream)

    def link_search(self, directory: Path):
        self._emit(f"cargo:rustc-link-search=native={directory}")

    def link_lib(self, kind: str, name: str):
        self._emit(f"cargo:rustc-link-lib={kind}={name}")


class ResourceCompilerStrategy(ABC):
    """
    Compiles a resource script with one toolchain family.

    Attributes:
        family: Toolchain family name
        tool_name: Name of the resource compiler executable
    """

    family: str = ""
    tool_name: str = ""

    def __init__(
        self,
        manifest_dir: Path,
        invoker: Optional[ToolInvoker] = None,
        directives: Optional[LinkDirectiveWriter] = None,
    ):
        """
        Initialize strategy.

        Args:
            manifest_dir: Project root, added to the resource include path
            invoker: Process invoker (defaults to subprocess)
            directives: Link directive writer (defaults to stdout)
        """
        self.manifest_dir = manifest_dir
        self.invoker = invoker or SubprocessInvoker()
        self.directives = directives or LinkDirectiveWriter()

    @abstractmethod
    def compile(self, rc_file: Path, tool: ResolvedTool, output_dir: Path) -> Path:
        """
        Compile ``rc_file`` and announce the result.

        Args:
            rc_file: Resource script
            tool: Resource compiler to run
            output_dir: Directory receiving the artifacts

        Returns:
            Path of the linkable artifact

        Raises:
            SubprocessFailedError: If a tool fails
            EncodingError: If a path cannot be passed to the tool
        """
        pass

    def _run(
        self,
        stage: str,
        executable: Path,
        args: List[str],
        cwd: Optional[Path] = None,
    ) -> ExitOutcome:
        try:
            return self.invoker.run(executable, args, cwd=cwd)
        except OSError as e:
            raise SubprocessFailedError(stage, stderr=str(e)) from e


class GnuResourceCompiler(ResourceCompilerStrategy):
    """MinGW ``windres`` + ``ar`` producing a static archive."""

    family = FAMILY_GNU
    tool_name = WINDRES_TOOL

    def __init__(
        self,
        manifest_dir: Path,
        invoker: Optional[ToolInvoker] = None,
        directives: Optional[LinkDirectiveWriter] = None,
        ar_path: Optional[str] = None,
    ):
        super().__init__(manifest_dir, invoker, directives)
        self.ar_path = ar_path

    def compile(self, rc_file: Path, tool: ResolvedTool, output_dir: Path) -> Path:
        # windres and ar run inside the tool directory, so every path is absolute.
        rc_file = rc_file.absolute()
        output_dir = output_dir.absolute()
        obj_file = output_dir / f"{RESOURCE_LIB_NAME}.o"
        archive = output_dir / f"lib{RESOURCE_LIB_NAME}.a"

        outcome = self._run(
            "windres",
            tool.path,
            [
                f"-I{encode_path(self.manifest_dir.absolute())}",
                encode_path(rc_file),
                encode_path(obj_file),
            ],
            cwd=tool.bin_dir,
        )
        if not outcome.success:
            raise SubprocessFailedError(
                "windres", outcome.returncode, outcome.stdout, outcome.stderr
            )

        # ar usually sits next to windres in a MinGW installation.
        ar = resolve_on_path(AR_TOOL, self.ar_path, search_dirs=[tool.bin_dir])
        outcome = self._run(
            "ar",
            ar.path,
            ["rsc", encode_path(archive), encode_path(obj_file)],
            cwd=tool.bin_dir,
        )
        if not outcome.success:
            raise SubprocessFailedError(
                "ar", outcome.returncode, outcome.stdout, outcome.stderr
            )

        logger.info(f"Created resource archive {archive}")
        self.directives.link_search(output_dir)
        self.directives.link_lib("static", RESOURCE_LIB_NAME)
        return archive


class MsvcResourceCompiler(ResourceCompilerStrategy):
    """Windows SDK ``rc.exe`` producing ``resource.lib``."""

    family = FAMILY_MSVC
    tool_name = "rc.exe"

    def compile(self, rc_file: Path, tool: ResolvedTool, output_dir: Path) -> Path:
        rc_file = rc_file.absolute()
        output_dir = output_dir.absolute()
        output = output_dir / f"{RESOURCE_LIB_NAME}.lib"

        args = [f"/I{encode_path(self.manifest_dir.absolute())}"]
        for category in sorted(tool.include_dirs):
            args.append(f"/I{encode_path(tool.include_dirs[category])}")
        args.append(f"/fo{encode_path(output)}")
        args.append(encode_path(rc_file))

        outcome = self._run("rc", tool.path, args)

        logger.info(f"RC Output:\n{outcome.stdout}\n------")
        logger.info(f"RC Error:\n{outcome.stderr}\n------")
        if not outcome.success:
            raise SubprocessFailedError(
                "rc", outcome.returncode, outcome.stdout, outcome.stderr
            )

        logger.info(f"Compiled resource {output}")
        self.directives.link_search(output_dir)
        self.directives.link_lib("dylib", RESOURCE_LIB_NAME)
        return output


def select_strategy(
    family: Optional[str],
    manifest_dir: Path,
    invoker: Optional[ToolInvoker] = None,
    directives: Optional[LinkDirectiveWriter] = None,
    ar_path: Optional[str] = None,
) -> ResourceCompilerStrategy:
    """
    Get the compiler strategy for a toolchain family.

    Args:
        family: 'msvc' or 'gnu'
        manifest_dir: Project root for the include path
        invoker: Process invoker
        directives: Link directive writer
        ar_path: Archiver executable (gnu only)

    Raises:
        UnsupportedToolchainError: For any other family
    """
    if family == FAMILY_GNU:
        return GnuResourceCompiler(manifest_dir, invoker, directives, ar_path=ar_path)
    if family == FAMILY_MSVC:
        return MsvcResourceCompiler(manifest_dir, invoker, directives)
    raise UnsupportedToolchainError(family)
