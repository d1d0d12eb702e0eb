"""TOML config loading for raven.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "raven.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class ModulesConfig:
    lib_dir: str = "lib"
    extension: str = ".rv"


@dataclass
class RunConfig:
    type_check: bool = True


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class RavenConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    modules: ModulesConfig = field(default_factory=ModulesConfig)
    run: RunConfig = field(default_factory=RunConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    # Directory holding raven.toml; None when running on defaults
    root: Path | None = None


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find raven.toml. Raises FileNotFoundError."""
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


def load_config(path: Path) -> RavenConfig:
    """Parse a raven.toml file into a RavenConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = RavenConfig(root=path.parent)

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "modules" in data:
        mods = data["modules"]
        config.modules = ModulesConfig(
            lib_dir=mods.get("lib_dir", "lib"),
            extension=mods.get("extension", ".rv"),
        )

    if "run" in data:
        config.run = RunConfig(
            type_check=data["run"].get("type_check", True),
        )

    if "diagnostics" in data:
        config.diagnostics = DiagnosticsConfig(
            color=data["diagnostics"].get("color", True),
        )

    return config


def config_for(start_path: Path | None = None) -> RavenConfig:
    """Load the nearest raven.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return RavenConfig()
