"""
Tests for winreskit.cli.parser and the CLI commands.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import make_sdk, registry_lines
from winreskit.cli.parser import CLI
from winreskit.cli.utils import build_environment, load_config
from winreskit.compiler.invoker import ExitOutcome, SubprocessInvoker
from winreskit.config.parser import ResourceConfig
from winreskit.core.environment import DictEnvironment
from winreskit.core.exceptions import ConfigError
from winreskit.core.platform import clear_platform_cache
from winreskit.toolchain.sdk import RegQueryReader


@pytest.fixture
def cli():
    return CLI()


@pytest.fixture
def env_args(tmp_path, project_dir):
    """``--env`` arguments describing package 'demo' 1.2.3."""
    values = {
        "CARGO_PKG_NAME": "demo",
        "CARGO_PKG_VERSION": "1.2.3",
        "CARGO_PKG_DESCRIPTION": "Demo application",
        "CARGO_PKG_VERSION_MAJOR": "1",
        "CARGO_PKG_VERSION_MINOR": "2",
        "CARGO_PKG_VERSION_PATCH": "3",
        "OUT_DIR": str(tmp_path / "out"),
    }
    args = ["--project-root", str(project_dir)]
    for key, value in values.items():
        args.extend(["--env", f"{key}={value}"])
    return args


@pytest.fixture
def registry(kits_root):
    make_sdk(kits_root, "10.0.17763.0")
    make_sdk(kits_root, "10.0.22621.0", archs=["x64"])
    lines = registry_lines({"KitsRoot10": kits_root}, ["10.0.17763.0", "10.0.22621.0"])
    with patch.object(RegQueryReader, "read_lines", return_value=lines) as mock_read:
        yield mock_read


@pytest.fixture(autouse=True)
def clear_cache():
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture(autouse=True)
def keep_log_capture():
    """Keep pytest's log capture handler in place while commands run."""
    with patch.object(CLI, "_configure_logging"):
        yield


class TestParser:
    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage: winreskit" in capsys.readouterr().out

    def test_version(self, cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.run(["--version"])

        assert exc_info.value.code == 0
        assert "winreskit" in capsys.readouterr().out

    def test_env_requires_key_value(self, cli):
        with pytest.raises(SystemExit):
            cli.parse_args(["--env", "NOVALUE", "render"])

    def test_env_values(self, cli):
        args = cli.parse_args(["--env", "A=1", "--env", "B=x=y", "render"])

        assert args.env == [["A", "1"], ["B", "x=y"]]

    def test_resolve_arch_choices(self, cli):
        with pytest.raises(SystemExit):
            cli.parse_args(["resolve", "--arch", "mips"])

    def test_compile_options(self, cli):
        args = cli.parse_args(
            ["compile", "--output-dir", "out", "--resource-file", "app.rc", "--toolchain", "gnu"]
        )

        assert args.output_dir == Path("out")
        assert args.resource_file == Path("app.rc")
        assert args.toolchain == "gnu"


class TestUtils:
    def test_build_environment(self, cli, tmp_path, monkeypatch):
        monkeypatch.setenv("WINRESKIT_TEST_VALUE", "from-os")
        args = cli.parse_args(
            ["--project-root", str(tmp_path), "--env", "OUT_DIR=/out", "render"]
        )

        env = build_environment(args)

        assert env.get("WINRESKIT_TEST_VALUE") == "from-os"
        assert env.get("OUT_DIR") == "/out"
        assert env.get("CARGO_MANIFEST_DIR") == str(tmp_path.resolve())

    def test_load_config_default_location(self, cli, project_dir):
        (project_dir / "winreskit.yaml").write_text("toolchain: gnu\n", encoding="utf-8")
        args = cli.parse_args(["render"])
        env = DictEnvironment({"CARGO_MANIFEST_DIR": str(project_dir)})

        assert load_config(args, env).toolchain == "gnu"

    def test_load_config_absent(self, cli, project_dir):
        args = cli.parse_args(["render"])
        env = DictEnvironment({"CARGO_MANIFEST_DIR": str(project_dir)})

        assert load_config(args, env) == ResourceConfig()

    def test_explicit_config_must_exist(self, cli, tmp_path):
        args = cli.parse_args(["--config", str(tmp_path / "missing.yaml"), "render"])

        with pytest.raises(ConfigError):
            load_config(args, DictEnvironment())


class TestRenderCommand:
    def test_stdout(self, cli, env_args, capsys):
        assert cli.run(env_args + ["render"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("#pragma code_page(65001)\n")
        assert 'VALUE "ProductName", "demo"' in out
        assert "FILEVERSION 1, 2, 3, 0" in out

    def test_output_file(self, cli, env_args, tmp_path):
        output = tmp_path / "app.rc"

        assert cli.run(env_args + ["render", "--output", str(output)]) == 0

        assert 'VALUE "FileVersion", "1.2.3"' in output.read_text(encoding="utf-8")

    def test_config_applied(self, cli, env_args, project_dir, capsys):
        (project_dir / "winreskit.yaml").write_text(
            "icon: app.ico\nproperties:\n  CompanyName: Demo Corp\n", encoding="utf-8"
        )

        assert cli.run(env_args + ["render"]) == 0

        out = capsys.readouterr().out
        assert 'VALUE "CompanyName", "Demo Corp"' in out
        assert '1 ICON "app.ico"' in out

    def test_invalid_config(self, cli, env_args, project_dir, caplog):
        (project_dir / "winreskit.yaml").write_text("toolchain: clang\n", encoding="utf-8")

        assert cli.run(env_args + ["render"]) == 1
        assert "Invalid toolchain" in caplog.text

    def test_unreadable_manifest(self, cli, env_args, caplog):
        with patch(
            "winreskit.resource.builder.load_metadata",
            side_effect=PermissionError("Permission denied: 'Cargo.toml'"),
        ):
            assert cli.run(env_args + ["render"]) == 1

        assert "Permission denied: 'Cargo.toml'" in caplog.text

    def test_missing_environment(self, cli, tmp_path, caplog, monkeypatch):
        monkeypatch.delenv("CARGO_PKG_VERSION", raising=False)

        assert cli.run(["--project-root", str(tmp_path), "render"]) == 1
        assert "CARGO_PKG_VERSION" in caplog.text


class TestDiscoverCommand:
    def test_lists_sdks(self, cli, registry, kits_root, capsys):
        assert cli.run(["discover"]) == 0

        out = capsys.readouterr().out
        assert f"KitsRoot10: {kits_root}" in out
        assert "10.0.17763.0" in out
        assert "rc.exe: x86, x64" in out
        assert "rc.exe: x64" in out

    def test_no_roots(self, cli, caplog):
        with patch.object(RegQueryReader, "read_lines", return_value=[]):
            assert cli.run(["discover"]) == 1

        assert "No installed root found" in caplog.text


class TestResolveCommand:
    def test_newest(self, cli, registry, kits_root, capsys):
        assert cli.run(["resolve", "--arch", "x64"]) == 0

        out = capsys.readouterr().out
        assert f"Tool:        {kits_root / 'bin' / '10.0.22621.0' / 'x64' / 'rc.exe'}" in out
        assert "SDK version: 10.0.22621.0" in out
        assert "Arch:        x64" in out

    def test_pinned(self, cli, registry, capsys):
        assert cli.run(["resolve", "--arch", "x64", "--sdk-version", "10.0.17763.0"]) == 0

        assert "SDK version: 10.0.17763.0" in capsys.readouterr().out

    def test_config_pin(self, cli, registry, project_dir, capsys):
        (project_dir / "winreskit.yaml").write_text(
            "sdk_version: 10.0.17763.0\n", encoding="utf-8"
        )

        assert cli.run(["--project-root", str(project_dir), "resolve", "--arch", "x64"]) == 0

        assert "SDK version: 10.0.17763.0" in capsys.readouterr().out

    def test_sdk_version_option_overrides_config(self, cli, registry, project_dir, capsys):
        (project_dir / "winreskit.yaml").write_text(
            "sdk_version: 10.0.17763.0\n", encoding="utf-8"
        )
        args = ["--project-root", str(project_dir), "resolve", "--arch", "x64"]

        assert cli.run(args + ["--sdk-version", "10.0.22621.0"]) == 0

        assert "SDK version: 10.0.22621.0" in capsys.readouterr().out

    def test_config_arch(self, cli, registry, tmp_path, capsys):
        config = tmp_path / "custom.yaml"
        config.write_text("arch: x86\n", encoding="utf-8")

        assert cli.run(["--config", str(config), "resolve"]) == 0

        out = capsys.readouterr().out
        assert "Arch:        x86" in out
        assert "SDK version: 10.0.17763.0" in out

    def test_no_tool_for_arch(self, cli, registry, caplog):
        assert cli.run(["resolve", "--arch", "arm64"]) == 1
        assert "No rc.exe tool found for arch arm64" in caplog.text


class TestCompileCommand:
    def test_gnu(self, cli, env_args, tmp_path, capsys):
        with patch.object(
            SubprocessInvoker, "run", return_value=ExitOutcome(0)
        ) as mock_run, patch("shutil.which", return_value=None):
            code = cli.run(env_args + ["compile", "--toolchain", "gnu"])

        assert code == 0
        out_dir = tmp_path / "out"
        assert (out_dir / "resource.rc").exists()
        assert mock_run.call_count == 2
        assert capsys.readouterr().out.splitlines() == [
            f"cargo:rustc-link-search=native={out_dir}",
            "cargo:rustc-link-lib=static=resource",
        ]

    def test_msvc(self, cli, env_args, registry, kits_root, tmp_path, capsys):
        args = env_args + [
            "--env",
            "CARGO_CFG_TARGET_ENV=msvc",
            "--env",
            "CARGO_CFG_TARGET_ARCH=x86",
            "compile",
        ]

        with patch.object(SubprocessInvoker, "run", return_value=ExitOutcome(0)) as mock_run:
            assert cli.run(args) == 0

        executable = mock_run.call_args[0][0]
        assert executable == kits_root / "bin" / "10.0.17763.0" / "x86" / "rc.exe"
        assert capsys.readouterr().out.splitlines()[-1] == "cargo:rustc-link-lib=dylib=resource"

    def test_compiler_failure(self, cli, env_args, caplog, capsys):
        with patch.object(
            SubprocessInvoker, "run", return_value=ExitOutcome(1, "", "windres: error")
        ), patch("shutil.which", return_value=None):
            code = cli.run(env_args + ["compile", "--toolchain", "gnu"])

        assert code == 1
        assert "windres: error" in caplog.text
        assert capsys.readouterr().out == ""

    def test_existing_resource_file(self, cli, env_args, project_dir):
        rc_file = project_dir / "app.rc"
        rc_file.write_text("", encoding="utf-8")

        with patch.object(
            SubprocessInvoker, "run", return_value=ExitOutcome(0)
        ) as mock_run, patch("shutil.which", return_value=None):
            code = cli.run(
                env_args + ["compile", "--toolchain", "gnu", "--resource-file", str(rc_file)]
            )

        assert code == 0
        windres_args = mock_run.call_args_list[0][0][1]
        assert str(rc_file) in windres_args
