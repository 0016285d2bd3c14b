"""
Resource compiler strategies and process execution.
"""

from winreskit.compiler.invoker import ExitOutcome, ToolInvoker, SubprocessInvoker
from winreskit.compiler.driver import (
    LinkDirectiveWriter,
    ResourceCompilerStrategy,
    GnuResourceCompiler,
    MsvcResourceCompiler,
    select_strategy,
    encode_path,
)

__all__ = [
    "ExitOutcome",
    "ToolInvoker",
    "SubprocessInvoker",
    "LinkDirectiveWriter",
    "ResourceCompilerStrategy",
    "GnuResourceCompiler",
    "MsvcResourceCompiler",
    "select_strategy",
    "encode_path",
]
