"""
Pytest configuration and shared fixtures for winreskit tests.
"""

import io
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from winreskit.compiler.driver import LinkDirectiveWriter
from winreskit.compiler.invoker import ExitOutcome, ToolInvoker
from winreskit.core.environment import DictEnvironment
from winreskit.toolchain.sdk import INSTALLED_ROOTS_KEY, RegistryReader


class FakeRegistryReader(RegistryReader):
    """Registry reader returning canned ``reg query`` output."""

    def __init__(self, lines: Iterable[str]):
        self.lines = list(lines)
        self.keys: List[str] = []

    def read_lines(self, key: str) -> List[str]:
        self.keys.append(key)
        return list(self.lines)


class FakeInvoker(ToolInvoker):
    """Invoker that records calls and returns scripted outcomes."""

    def __init__(self, outcomes: Optional[List[ExitOutcome]] = None):
        self.outcomes = list(outcomes or [])
        self.calls: List[Dict] = []

    def run(self, executable, args, cwd=None) -> ExitOutcome:
        self.calls.append({"executable": executable, "args": list(args), "cwd": cwd})
        if self.outcomes:
            return self.outcomes.pop(0)
        return ExitOutcome(returncode=0)


def registry_lines(roots: Dict[str, Path], versions: Iterable[str]) -> List[str]:
    """Build ``reg query`` output for the given roots and versions."""
    lines = ["", INSTALLED_ROOTS_KEY]
    for name, path in roots.items():
        lines.append(f"    {name}    REG_SZ    {path}")
    lines.append("")
    for version in versions:
        lines.append(f"{INSTALLED_ROOTS_KEY}\\{version}")
    return lines


def make_sdk(
    root: Path,
    version: str,
    archs: Iterable[str] = ("x64", "x86"),
    tools: Iterable[str] = ("rc.exe",),
    includes: Iterable[str] = ("shared", "ucrt", "um"),
    libs: Iterable[str] = ("ucrt", "um"),
) -> Path:
    """
    Create a Windows SDK directory layout.

    Returns:
        The SDK's ``bin/<version>`` directory
    """
    bin_root = root / "bin" / version
    bin_root.mkdir(parents=True, exist_ok=True)
    tools = list(tools)
    archs = list(archs)
    for arch in archs:
        arch_dir = bin_root / arch
        arch_dir.mkdir(exist_ok=True)
        for tool in tools:
            (arch_dir / tool).write_text("")

    for category in includes:
        (root / "Include" / version / category).mkdir(parents=True, exist_ok=True)

    for category in libs:
        for arch in archs:
            (root / "Lib" / version / category / arch).mkdir(parents=True, exist_ok=True)

    return bin_root


@pytest.fixture
def kits_root(tmp_path) -> Path:
    """Empty Windows Kits installation root."""
    root = tmp_path / "Windows Kits" / "10"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def directive_stream():
    """Captures link directives."""
    return io.StringIO()


@pytest.fixture
def directives(directive_stream):
    return LinkDirectiveWriter(directive_stream)


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def project_dir(tmp_path) -> Path:
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def build_env(tmp_path, project_dir) -> DictEnvironment:
    """Environment as provided by the build system for package 'demo' 1.2.3."""
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return DictEnvironment(
        {
            "CARGO_PKG_NAME": "demo",
            "CARGO_PKG_VERSION": "1.2.3",
            "CARGO_PKG_DESCRIPTION": "Demo application",
            "CARGO_PKG_VERSION_MAJOR": "1",
            "CARGO_PKG_VERSION_MINOR": "2",
            "CARGO_PKG_VERSION_PATCH": "3",
            "CARGO_MANIFEST_DIR": str(project_dir),
            "OUT_DIR": str(out_dir),
        }
    )
