"""TOML config loading for matchbox.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "matchbox.toml"


@dataclass
class RunConfig:
    typecheck: bool = True
    keep_going: bool = False
    prelude: bool = True
    trace: bool = False


@dataclass
class OutputConfig:
    color: bool = True


@dataclass
class MatchboxConfig:
    run: RunConfig = field(default_factory=RunConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Nearest matchbox.toml at or above ``start_path`` (default: cwd).

    Raises FileNotFoundError when no directory up to the root has one.
    """
    start = (start_path or Path.cwd()).resolve()
    if start.is_file():
        start = start.parent
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_NAME
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")


def load_config(path: Path) -> MatchboxConfig:
    """Parse a matchbox.toml file into a MatchboxConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = MatchboxConfig()

    if "run" in data:
        run = data["run"]
        config.run = RunConfig(
            typecheck=run.get("typecheck", True),
            keep_going=run.get("keep_going", False),
            prelude=run.get("prelude", True),
            trace=run.get("trace", False),
        )

    if "output" in data:
        out = data["output"]
        config.output = OutputConfig(color=out.get("color", True))

    return config


def config_for(start_path: Path | None = None) -> MatchboxConfig:
    """Load the nearest matchbox.toml, or the defaults if there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return MatchboxConfig()
