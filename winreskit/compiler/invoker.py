"""
Process execution for external tools.

The compiler strategies never spawn processes themselves; they go through a
:class:`ToolInvoker` so tests can record calls and script outcomes.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitOutcome:
    """Result of a finished tool process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ToolInvoker(ABC):
    """Runs an external tool to completion."""

    @abstractmethod
    def run(
        self, executable: Path, args: List[str], cwd: Optional[Path] = None
    ) -> ExitOutcome:
        """
        Run a tool and wait for it to exit.

        Args:
            executable: Tool executable
            args: Command line arguments (without the executable)
            cwd: Working directory, or None for the current one

        Returns:
            Exit status and captured output

        Raises:
            OSError: If the process cannot be started
        """
        pass


class SubprocessInvoker(ToolInvoker):
    """
    Invoker backed by :func:`subprocess.run`.

    There is no timeout; a hung tool blocks until the build system kills it.
    """

    def run(
        self, executable: Path, args: List[str], cwd: Optional[Path] = None
    ) -> ExitOutcome:
        cmd = [str(executable), *args]
        logger.debug(f"Running {' '.join(cmd)}" + (f" in {cwd}" if cwd else ""))

        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return ExitOutcome(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
