"""Locate and invoke the .NET IL toolchain (ildasm, ilasm, peverify)."""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from inlineil.config import InlineILConfig

ILDASM_NAMES = ("ildasm", "ildasm.exe")
ILASM_NAMES = ("ilasm", "ilasm.exe")
PEVERIFY_NAMES = ("peverify", "PEVerify.exe")


class ToolchainError(Exception):
    """Raised when a toolchain program is missing or fails."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        super().__init__(message)


@dataclass(frozen=True)
class Toolchain:
    """Resolved toolchain executables. None means not found."""

    ildasm: str | None = None
    ilasm: str | None = None
    peverify: str | None = None
    timeout: int = 120


def sdk_dir_from_env() -> Path | None:
    """The SDK ``Bin`` directory named by ``FrameworkSDKDir``, if set."""
    sdk = os.environ.get("FrameworkSDKDir")
    if not sdk:
        return None
    return Path(sdk) / "Bin"


def find_tool(names: tuple[str, ...], sdk_dir: Path | None = None) -> str | None:
    """Search *sdk_dir*, then PATH, for the first of *names*."""
    if sdk_dir is not None:
        for name in names:
            candidate = sdk_dir / name
            if candidate.is_file():
                return str(candidate)
    for name in names:
        found = shutil.which(name)
        if found:
            return found
    return None


def find_toolchain(config: InlineILConfig) -> Toolchain:
    """Resolve every tool, preferring explicit paths from the config."""
    tc = config.toolchain
    sdk_dir = Path(tc.sdk_dir) if tc.sdk_dir else sdk_dir_from_env()
    return Toolchain(
        ildasm=tc.ildasm or find_tool(ILDASM_NAMES, sdk_dir),
        ilasm=tc.ilasm or find_tool(ILASM_NAMES, sdk_dir),
        peverify=tc.peverify or find_tool(PEVERIFY_NAMES, sdk_dir),
        timeout=tc.timeout,
    )


def _run(cmd: list[str], what: str, timeout: int) -> None:
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise ToolchainError(f"{what}: '{cmd[0]}' not found")
    except subprocess.TimeoutExpired:
        raise ToolchainError(f"{what} timed out")

    if result.returncode != 0:
        raise ToolchainError(
            f"{what} failed (exit {result.returncode})",
            stderr=result.stderr or result.stdout,
        )


def disassemble(module: Path, output_il: Path, toolchain: Toolchain) -> Path:
    """Disassemble *module* to IL text, keeping line number information."""
    if toolchain.ildasm is None:
        raise ToolchainError("no ildasm found (set toolchain.sdk_dir or FrameworkSDKDir)")
    cmd = [
        toolchain.ildasm,
        str(module),
        "/linenum",
        "/text",
        "/nobar",
        f"/out={output_il}",
    ]
    _run(cmd, "disassembly", toolchain.timeout)
    return output_il


def assemble(
    il_file: Path,
    output: Path,
    toolchain: Toolchain,
    *,
    output_type: str = "exe",
    key_file: str | None = None,
    optimize: bool = True,
    debug: bool = True,
) -> Path:
    """Assemble IL text into a module.

    ``/debug`` (rather than ``/debug=impl``) makes the runtime use the
    explicit sequence points, which are what allow stepping through the
    injected IL.
    """
    if toolchain.ilasm is None:
        raise ToolchainError("no ilasm found (set toolchain.ilasm or add it to PATH)")
    cmd = [toolchain.ilasm, str(il_file), f"/output={output}"]
    if optimize:
        cmd.append("/optimize")
    if debug:
        cmd.append("/debug")
    cmd.append(f"/{output_type.upper()}")
    if key_file:
        cmd.append(f"/key={key_file}")
    cmd.extend(["/nologo", "/quiet"])
    _run(cmd, "assembly", toolchain.timeout)
    return output


def verify(module: Path, toolchain: Toolchain) -> None:
    """Run peverify on *module*."""
    if toolchain.peverify is None:
        raise ToolchainError("no peverify found (set toolchain.peverify or toolchain.sdk_dir)")
    _run([toolchain.peverify, str(module)], "verification", toolchain.timeout)
