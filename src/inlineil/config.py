"""TOML config loading for inlineil.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from inlineil.scanner import Language

CONFIG_NAME = "inlineil.toml"


@dataclass
class ToolchainConfig:
    sdk_dir: str = ""
    ildasm: str = ""
    ilasm: str = ""
    peverify: str = ""
    timeout: int = 120


@dataclass
class AssembleConfig:
    output_type: str = "exe"
    optimize: bool = True
    debug: bool = True
    key_file: str = ""


@dataclass
class InlineILConfig:
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    assemble: AssembleConfig = field(default_factory=AssembleConfig)
    languages: dict[str, Language] = field(default_factory=dict)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find inlineil.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> InlineILConfig:
    """Parse an inlineil.toml file into an InlineILConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = InlineILConfig()

    if "toolchain" in data:
        tc = data["toolchain"]
        config.toolchain = ToolchainConfig(
            sdk_dir=tc.get("sdk_dir", ""),
            ildasm=tc.get("ildasm", ""),
            ilasm=tc.get("ilasm", ""),
            peverify=tc.get("peverify", ""),
            timeout=tc.get("timeout", 120),
        )

    if "assemble" in data:
        asm = data["assemble"]
        output_type = asm.get("output_type", "exe").lower()
        if output_type not in ("exe", "dll"):
            raise ValueError(
                f"{path}: assemble.output_type must be 'exe' or 'dll', "
                f"got '{output_type}'"
            )
        config.assemble = AssembleConfig(
            output_type=output_type,
            optimize=asm.get("optimize", True),
            debug=asm.get("debug", True),
            key_file=asm.get("key_file", ""),
        )

    for ext, markers in data.get("languages", {}).items():
        ext = ext.lower()
        if not ext.startswith("."):
            ext = "." + ext
        config.languages[ext] = Language(
            name=markers.get("name", ext),
            start_marker=markers["start"],
            end_marker=markers["end"],
        )

    return config


def load_config_or_default(start_path: Path | None = None) -> InlineILConfig:
    """Load the nearest inlineil.toml, or defaults if there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return InlineILConfig()
