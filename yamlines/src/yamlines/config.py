"""TOML config loading for yamlines.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

log = logging.getLogger(__name__)

CONFIG_NAME = "yamlines.toml"


@dataclass
class RenderConfig:
    context: int = 2


@dataclass
class HighlightConfig:
    style: str = "default"


@dataclass
class DocumentsConfig:
    reset_positions: bool = False


@dataclass
class DiffConfig:
    context: int = 3


@dataclass
class YamlinesConfig:
    render: RenderConfig = field(default_factory=RenderConfig)
    highlight: HighlightConfig = field(default_factory=HighlightConfig)
    documents: DocumentsConfig = field(default_factory=DocumentsConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find yamlines.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    for directory in (path, *path.parents):
        if (directory / CONFIG_NAME).exists():
            return directory / CONFIG_NAME
    raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")


def _section(name: str, cls: type, values: dict) -> object:
    known = {f.name for f in fields(cls)}
    for key in sorted(values.keys() - known):
        log.warning("ignoring unknown key %s.%s", name, key)
    return cls(**{k: v for k, v in values.items() if k in known})


def load_config(path: Path) -> YamlinesConfig:
    """Parse a yamlines.toml file into a YamlinesConfig.

    Each table maps onto the section dataclass of the same name; missing
    tables and keys keep their defaults.
    """
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = YamlinesConfig()
    for section in fields(config):
        if section.name in data:
            value = _section(section.name, section.default_factory, data[section.name])
            setattr(config, section.name, value)
    return config


def resolve_config(explicit: Path | None = None, start_path: Path | None = None) -> YamlinesConfig:
    """Load *explicit*, else the nearest yamlines.toml, else defaults."""
    if explicit is not None:
        return load_config(explicit)
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return YamlinesConfig()
