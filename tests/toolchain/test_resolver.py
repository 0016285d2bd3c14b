"""
Tests for winreskit.toolchain.resolver module.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import FakeRegistryReader, make_sdk, registry_lines
from winreskit.core.exceptions import ResolutionError, ToolNotFoundError
from winreskit.toolchain.resolver import (
    RC_TOOL,
    resolve,
    resolve_on_path,
    version_key,
)
from winreskit.toolchain.sdk import Arch, discover


def _inventory(root: Path, versions, archs=("x64", "x86")):
    for version in versions:
        make_sdk(root, version, archs=archs)
    return discover(FakeRegistryReader(registry_lines({"KitsRoot10": root}, versions)))


class TestVersionKey:
    """Tests for version_key."""

    def test_numeric_comparison(self):
        assert version_key("10.0.9200.0") < version_key("10.0.10240.0")
        assert version_key("10.0.17763.0") < version_key("10.0.22621.0")

    def test_invalid_sorts_lowest(self):
        assert version_key("not-a-version") < version_key("0.0.0.1")


class TestResolve:
    """Tests for resolve."""

    def test_pinned_version_wins(self, kits_root):
        inventory = _inventory(kits_root, ["10.0.1", "10.0.5", "10.0.3"])

        tool = resolve(inventory, RC_TOOL, Arch.X64, preferred_version="10.0.3")

        assert tool.sdk_version == "10.0.3"
        assert tool.path == kits_root / "bin" / "10.0.3" / "x64" / RC_TOOL

    def test_newest_version_without_pin(self, kits_root):
        inventory = _inventory(kits_root, ["10.0.1", "10.0.5", "10.0.3"])

        tool = resolve(inventory, RC_TOOL, Arch.X64)

        assert tool.sdk_version == "10.0.5"

    @pytest.mark.parametrize(
        "versions",
        [
            ["10.0.9200.0", "10.0.10240.0", "10.0.17763.0"],
            ["10.0.17763.0", "10.0.9200.0", "10.0.10240.0"],
            ["10.0.10240.0", "10.0.17763.0", "10.0.9200.0"],
        ],
    )
    def test_newest_is_numeric_regardless_of_order(self, kits_root, versions):
        inventory = _inventory(kits_root, versions)

        tool = resolve(inventory, RC_TOOL, Arch.X86)

        assert tool.sdk_version == "10.0.17763.0"

    def test_unavailable_pin_falls_back_to_newest(self, kits_root):
        inventory = _inventory(kits_root, ["10.0.1", "10.0.5"])

        tool = resolve(inventory, RC_TOOL, Arch.X64, preferred_version="10.0.9")

        assert tool.sdk_version == "10.0.5"

    def test_pin_without_tool_for_arch_falls_back(self, kits_root):
        make_sdk(kits_root, "10.0.3", archs=["x86"])
        make_sdk(kits_root, "10.0.1", archs=["x64"])
        inventory = discover(
            FakeRegistryReader(
                registry_lines({"KitsRoot10": kits_root}, ["10.0.3", "10.0.1"])
            )
        )

        tool = resolve(inventory, RC_TOOL, Arch.X64, preferred_version="10.0.3")

        assert tool.sdk_version == "10.0.1"

    def test_single_candidate(self, kits_root):
        inventory = _inventory(kits_root, ["10.0.17763.0"])

        tool = resolve(inventory, RC_TOOL, Arch.X64)

        assert tool.sdk_version == "10.0.17763.0"
        assert tool.arch is Arch.X64

    def test_tool_carries_include_dirs(self, kits_root):
        inventory = _inventory(kits_root, ["10.0.17763.0"])

        tool = resolve(inventory, RC_TOOL, Arch.X64)

        assert set(tool.include_dirs) == {"shared", "ucrt", "um"}
        assert set(tool.lib_dirs) == {"ucrt", "um"}

    def test_no_candidate_for_arch(self, kits_root):
        inventory = _inventory(kits_root, ["10.0.17763.0"], archs=["x86"])

        with pytest.raises(ToolNotFoundError) as exc_info:
            resolve(inventory, RC_TOOL, Arch.ARM64)

        assert exc_info.value.tool_name == RC_TOOL
        assert exc_info.value.arch == Arch.ARM64
        assert str(kits_root) in str(exc_info.value)

    def test_no_sdk_installed(self, kits_root):
        inventory = discover(
            FakeRegistryReader(registry_lines({"KitsRoot10": kits_root}, []))
        )

        with pytest.raises(ResolutionError):
            resolve(inventory, RC_TOOL, Arch.X64)

    def test_same_version_in_two_roots(self, tmp_path):
        root_a = tmp_path / "a"
        root_b = tmp_path / "b"
        make_sdk(root_a, "10.0.5")
        make_sdk(root_b, "10.0.5")
        inventory = discover(
            FakeRegistryReader(
                registry_lines({"KitsRoot10": root_a, "KitsRoot81": root_b}, ["10.0.5"])
            )
        )

        tool = resolve(inventory, RC_TOOL, Arch.X64)

        assert tool.installed_root == root_b

    def test_pin_matching_two_roots_uses_first(self, tmp_path):
        root_a = tmp_path / "a"
        root_b = tmp_path / "b"
        make_sdk(root_a, "10.0.5")
        make_sdk(root_b, "10.0.5")
        inventory = discover(
            FakeRegistryReader(
                registry_lines({"KitsRoot10": root_a, "KitsRoot81": root_b}, ["10.0.5"])
            )
        )

        tool = resolve(inventory, RC_TOOL, Arch.X64, preferred_version="10.0.5")

        assert tool.installed_root == root_a


class TestResolveOnPath:
    """Tests for resolve_on_path."""

    def test_explicit_path(self, tmp_path):
        windres = tmp_path / "windres"

        with patch("shutil.which", return_value=None):
            tool = resolve_on_path("windres", str(windres))

        assert tool.path == windres
        assert tool.bin_dir == tmp_path
        assert tool.sdk_version == ""
        assert tool.arch is None
        assert tool.include_dirs == {}

    def test_found_on_path(self, tmp_path):
        found = str(tmp_path / "bin" / "windres")

        with patch("shutil.which", return_value=found):
            tool = resolve_on_path("windres")

        assert tool.path == Path(found)
        assert tool.bin_dir == tmp_path / "bin"

    def test_search_dirs_before_path(self, tmp_path):
        calls = []

        def fake_which(name, path=None):
            calls.append(path)
            return str(tmp_path / name) if path == str(tmp_path) else None

        with patch("shutil.which", side_effect=fake_which):
            tool = resolve_on_path("ar", search_dirs=[tmp_path])

        assert calls == [str(tmp_path)]
        assert tool.path == tmp_path / "ar"

    def test_not_found_keeps_bare_name(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with patch("shutil.which", return_value=None):
            tool = resolve_on_path("windres")

        assert tool.path == Path("windres")
        assert tool.bin_dir == tmp_path

    def test_relative_explicit_path_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cwd = Path.cwd()

        with patch("shutil.which", return_value=None):
            tool = resolve_on_path("windres", "mingw/bin/windres")

        assert tool.path == cwd / "mingw" / "bin" / "windres"
        assert tool.bin_dir == cwd / "mingw" / "bin"
