"""
High level resource builder.

:class:`WindowsResource` ties the pipeline together for a build step:

    from winreskit.resource import WindowsResource

    res = WindowsResource()
    res.set_icon("test.ico").set("InternalName", "TEST.EXE")
    res.compile()

The descriptor is seeded from the build environment and the project
metadata, the resource script is written to ``<out>/resource.rc`` (unless an
existing script was supplied) and the family specific compiler strategy
produces and announces the linkable artifact.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..compiler.driver import (
    GnuResourceCompiler,
    LinkDirectiveWriter,
    ResourceCompilerStrategy,
    select_strategy,
)
from ..compiler.invoker import ToolInvoker
from ..core.environment import (
    EnvironmentSource,
    OsEnvironment,
    output_directory,
    preferred_sdk_version,
    project_root,
)
from ..core.exceptions import ResolutionError
from ..core.platform import TargetInfo, detect_target
from ..toolchain.resolver import resolve, resolve_on_path
from ..toolchain.sdk import Arch, RegistryReader, ResolvedTool, discover
from .descriptor import Descriptor, VersionInfo
from .metadata import load_metadata
from .serializer import write_resource_file

if TYPE_CHECKING:
    from ..config.parser import ResourceConfig

logger = logging.getLogger(__name__)

RESOURCE_SCRIPT = "resource.rc"


class WindowsResource:
    """Configures and compiles the Windows resource of one build."""

    def __init__(
        self,
        env: Optional[EnvironmentSource] = None,
        registry: Optional[RegistryReader] = None,
        invoker: Optional[ToolInvoker] = None,
        directives: Optional[LinkDirectiveWriter] = None,
        target: Optional[TargetInfo] = None,
    ):
        """
        Initialize the resource from the build environment.

        Args:
            env: Environment source (defaults to the process environment)
            registry: Registry reader used for SDK discovery
            invoker: Process invoker used to run the compiler
            directives: Link directive writer
            target: Target family and architecture (detected if omitted)

        Raises:
            EnvironmentMissingError: If a required package value is missing
        """
        self.env = env or OsEnvironment()
        self.registry = registry
        self.invoker = invoker
        self.directives = directives
        self.target = target or detect_target(self.env)

        self.project_root = project_root(self.env)
        self.descriptor = Descriptor.from_environment(
            self.env, load_metadata(self.project_root)
        )
        self.output_directory = output_directory(self.env)
        self.sdk_version = preferred_sdk_version(self.env)
        self.rc_file: Optional[Path] = None
        self.windres_path: Optional[str] = None
        self.ar_path: Optional[str] = None
        self._tool: Optional[ResolvedTool] = None

    # ------------------------------------------------------------------
    # Descriptor settings
    # ------------------------------------------------------------------

    def set(self, name: str, value: str) -> "WindowsResource":
        self.descriptor.set(name, value)
        return self

    def set_language(self, language: int) -> "WindowsResource":
        self.descriptor.set_language(language)
        return self

    def set_icon(self, path: str) -> "WindowsResource":
        self.descriptor.set_icon(path)
        return self

    def set_icon_with_id(self, path: str, icon_id: str) -> "WindowsResource":
        self.descriptor.set_icon_with_id(path, icon_id)
        return self

    def set_version_info(self, field_name: VersionInfo, value: int) -> "WindowsResource":
        self.descriptor.set_version_info(field_name, value)
        return self

    def set_manifest(self, manifest: str) -> "WindowsResource":
        self.descriptor.set_manifest(manifest)
        return self

    def set_manifest_file(self, path: str) -> "WindowsResource":
        self.descriptor.set_manifest_file(path)
        return self

    # ------------------------------------------------------------------
    # Build settings
    # ------------------------------------------------------------------

    def set_resource_file(self, path: str) -> "WindowsResource":
        """
        Use an existing resource script instead of generating one.

        The file is passed to the compiler unmodified.
        """
        self.rc_file = Path(path)
        return self

    def set_output_directory(self, path: str) -> "WindowsResource":
        self.output_directory = Path(path)
        return self

    def set_windres_path(self, path: str) -> "WindowsResource":
        self.windres_path = path
        return self

    def set_ar_path(self, path: str) -> "WindowsResource":
        self.ar_path = path
        return self

    def set_tool(self, tool: ResolvedTool) -> "WindowsResource":
        """Use ``tool`` instead of looking up a resource compiler."""
        self._tool = tool
        return self

    def apply_config(self, config: "ResourceConfig") -> "WindowsResource":
        """
        Apply settings from a configuration file on top of the defaults.

        Args:
            config: Parsed configuration
        """
        if config.toolchain or config.arch:
            self.target = TargetInfo(
                os=self.target.os,
                family=config.toolchain or self.target.family,
                arch=config.arch or self.target.arch,
            )
        if config.sdk_version:
            self.sdk_version = config.sdk_version
        if config.output_directory:
            self.set_output_directory(config.output_directory)
        if config.windres_path:
            self.set_windres_path(config.windres_path)
        if config.ar_path:
            self.set_ar_path(config.ar_path)
        if config.resource_file:
            self.set_resource_file(config.resource_file)
        if config.language is not None:
            self.set_language(config.language)
        if config.icon:
            if config.icon_id:
                self.set_icon_with_id(config.icon, config.icon_id)
            else:
                self.set_icon(config.icon)
        if config.manifest is not None:
            self.set_manifest(config.manifest)
        elif config.manifest_file is not None:
            self.set_manifest_file(config.manifest_file)
        for name, value in config.properties.items():
            self.set(name, value)
        for field_name, value in config.version_info.items():
            self.set_version_info(field_name, value)
        return self

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def strategy(self) -> ResourceCompilerStrategy:
        """
        Get the compiler strategy of the target's toolchain family.

        Raises:
            UnsupportedToolchainError: If the target family has no resource compiler
        """
        return select_strategy(
            self.target.family,
            self.project_root,
            invoker=self.invoker,
            directives=self.directives,
            ar_path=self.ar_path,
        )

    def tool(self) -> ResolvedTool:
        """
        Get the resource compiler, resolving it on first use.

        Once resolved, the same tool is used for the rest of the build.

        Raises:
            UnsupportedToolchainError: If the target has no supported family
            DiscoveryError: If no SDK installation root is registered
            ResolutionError: If the architecture is unsupported or no SDK
                provides the compiler
        """
        if self._tool is not None:
            return self._tool

        strategy = self.strategy()
        if isinstance(strategy, GnuResourceCompiler):
            self._tool = resolve_on_path(strategy.tool_name, self.windres_path)
        else:
            if self.target.arch is None:
                raise ResolutionError(
                    f"Unsupported target architecture for {strategy.tool_name}"
                )
            inventory = discover(self.registry)
            self._tool = resolve(
                inventory,
                strategy.tool_name,
                Arch.from_name(self.target.arch),
                self.sdk_version,
            )

        logger.info(f"Resource compiler: {self._tool}")
        return self._tool

    def write_resource_file(self, path: Optional[Path] = None) -> Path:
        """
        Write the generated resource script.

        Args:
            path: Destination (defaults to ``<output dir>/resource.rc``)

        Raises:
            SerializationIoError: If the file cannot be written
        """
        path = path or self.output_directory / RESOURCE_SCRIPT
        return write_resource_file(self.descriptor, path)

    def compile(self) -> Path:
        """
        Run the resource compiler.

        Generates the resource script (or uses the one set with
        :meth:`set_resource_file`), compiles it, and prints the link
        directives for the build system.

        Returns:
            Path of the linkable artifact

        Raises:
            WinResKitError: On any failure; nothing is retried
        """
        strategy = self.strategy()

        if self.rc_file is None:
            rc_file = self.write_resource_file()
        else:
            rc_file = self.rc_file
            logger.debug(f"Using existing resource file {rc_file}")

        return strategy.compile(rc_file, self.tool(), self.output_directory)
