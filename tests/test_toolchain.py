"""Tests for toolchain discovery and invocation."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from inlineil.config import InlineILConfig, ToolchainConfig
from inlineil.toolchain import (
    ILDASM_NAMES,
    Toolchain,
    ToolchainError,
    assemble,
    disassemble,
    find_tool,
    find_toolchain,
    sdk_dir_from_env,
    verify,
)

_TOOLCHAIN = Toolchain(ildasm="ildasm", ilasm="ilasm", peverify="peverify", timeout=30)


def _completed(returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr=stderr)


class TestDiscovery:
    def test_sdk_dir_wins(self, tmp_path):
        (tmp_path / "ildasm.exe").write_text("")
        with patch("inlineil.toolchain.shutil.which", return_value="/usr/bin/ildasm"):
            assert find_tool(ILDASM_NAMES, tmp_path) == str(tmp_path / "ildasm.exe")

    def test_falls_back_to_path(self, tmp_path):
        with patch("inlineil.toolchain.shutil.which", return_value="/usr/bin/ildasm") as which:
            assert find_tool(ILDASM_NAMES, tmp_path) == "/usr/bin/ildasm"
        which.assert_called_with("ildasm")

    def test_not_found(self):
        with patch("inlineil.toolchain.shutil.which", return_value=None):
            assert find_tool(ILDASM_NAMES) is None

    def test_sdk_dir_from_env(self, monkeypatch):
        monkeypatch.setenv("FrameworkSDKDir", "/opt/sdk")
        assert sdk_dir_from_env() == Path("/opt/sdk") / "Bin"

    def test_sdk_dir_from_env_unset(self, monkeypatch):
        monkeypatch.delenv("FrameworkSDKDir", raising=False)
        assert sdk_dir_from_env() is None

    def test_explicit_config_paths(self):
        config = InlineILConfig(toolchain=ToolchainConfig(
            ildasm="/x/ildasm", ilasm="/x/ilasm", peverify="/x/peverify", timeout=5,
        ))
        with patch("inlineil.toolchain.shutil.which", return_value=None):
            toolchain = find_toolchain(config)
        assert toolchain == Toolchain("/x/ildasm", "/x/ilasm", "/x/peverify", timeout=5)

    def test_missing_tools_are_none(self, monkeypatch):
        monkeypatch.delenv("FrameworkSDKDir", raising=False)
        with patch("inlineil.toolchain.shutil.which", return_value=None):
            toolchain = find_toolchain(InlineILConfig())
        assert toolchain.ildasm is None
        assert toolchain.ilasm is None


class TestInvocation:
    def test_disassemble_command(self, tmp_path):
        with patch("inlineil.toolchain.subprocess.run", return_value=_completed()) as run:
            disassemble(tmp_path / "Foo.exe", tmp_path / "Foo.il", _TOOLCHAIN)
        cmd = run.call_args.args[0]
        assert cmd == [
            "ildasm", str(tmp_path / "Foo.exe"),
            "/linenum", "/text", "/nobar", f"/out={tmp_path / 'Foo.il'}",
        ]
        assert run.call_args.kwargs["timeout"] == 30

    def test_assemble_command(self, tmp_path):
        with patch("inlineil.toolchain.subprocess.run", return_value=_completed()) as run:
            assemble(
                tmp_path / "Foo.il", tmp_path / "Foo.dll", _TOOLCHAIN,
                output_type="dll", key_file="key.snk",
            )
        cmd = run.call_args.args[0]
        assert cmd == [
            "ilasm", str(tmp_path / "Foo.il"), f"/output={tmp_path / 'Foo.dll'}",
            "/optimize", "/debug", "/DLL", "/key=key.snk", "/nologo", "/quiet",
        ]

    def test_assemble_without_debug_or_optimize(self, tmp_path):
        with patch("inlineil.toolchain.subprocess.run", return_value=_completed()) as run:
            assemble(tmp_path / "a.il", tmp_path / "a.exe", _TOOLCHAIN, optimize=False, debug=False)
        cmd = run.call_args.args[0]
        assert "/optimize" not in cmd
        assert "/debug" not in cmd
        assert "/EXE" in cmd

    def test_verify_command(self, tmp_path):
        with patch("inlineil.toolchain.subprocess.run", return_value=_completed()) as run:
            verify(tmp_path / "a.exe", _TOOLCHAIN)
        assert run.call_args.args[0] == ["peverify", str(tmp_path / "a.exe")]

    def test_nonzero_exit(self, tmp_path):
        with patch("inlineil.toolchain.subprocess.run", return_value=_completed(1, "syntax error")):
            with pytest.raises(ToolchainError, match=r"assembly failed \(exit 1\)") as exc:
                assemble(tmp_path / "a.il", tmp_path / "a.exe", _TOOLCHAIN)
        assert exc.value.stderr == "syntax error"

    def test_program_missing(self, tmp_path):
        with patch("inlineil.toolchain.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(ToolchainError, match="'ildasm' not found"):
                disassemble(tmp_path / "a.exe", tmp_path / "a.il", _TOOLCHAIN)

    def test_timeout(self, tmp_path):
        with patch(
            "inlineil.toolchain.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="peverify", timeout=30),
        ):
            with pytest.raises(ToolchainError, match="verification timed out"):
                verify(tmp_path / "a.exe", _TOOLCHAIN)

    def test_unresolved_tool(self, tmp_path):
        with pytest.raises(ToolchainError, match="no ilasm found"):
            assemble(tmp_path / "a.il", tmp_path / "a.exe", Toolchain())
