"""Configuration loading for bunbind (.bunbind.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .emitter import DEFAULT_BIN_DIR
from .extractors.tokens import SignatureParseError, normalize_type
from .type_map import KNOWN_TAGS

CONFIG_FILENAME = ".bunbind.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BunbindConfig:
    """Represents the settings defined in .bunbind.yml."""

    root: Path
    source_dir: str = "rs"
    output_dir: str = "mod"
    index_file: str = "index.ts"
    bin_dir: str = DEFAULT_BIN_DIR
    platform: Optional[str] = None
    workers: int = 1
    exclude_paths: List[str] = field(default_factory=list)
    type_aliases: Dict[str, str] = field(default_factory=dict)
    templates_dir: Optional[Path] = None

    @property
    def source_root(self) -> Path:
        return self.root / self.source_dir

    @property
    def output_root(self) -> Path:
        return self.root / self.output_dir

    @property
    def index_path(self) -> Path:
        return self.root / self.index_file


def load_config(config_path: Path) -> BunbindConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BunbindConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults = BunbindConfig(root=root)
    templates_dir_str = _as_str(data.get("templates_dir"))

    workers = _as_int(data.get("workers"))
    if workers is not None and workers < 1:
        raise ConfigError("workers must be a positive integer")

    return BunbindConfig(
        root=root,
        source_dir=_as_str(data.get("source_dir")) or defaults.source_dir,
        output_dir=_as_str(data.get("output_dir")) or defaults.output_dir,
        index_file=_as_str(data.get("index_file")) or defaults.index_file,
        bin_dir=_as_str(data.get("bin_dir")) or defaults.bin_dir,
        platform=_as_str(data.get("platform")),
        workers=workers or defaults.workers,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        type_aliases=_parse_type_aliases(data.get("type_aliases")),
        templates_dir=root / templates_dir_str if templates_dir_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _parse_type_aliases(value: Any) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError("type_aliases must be a mapping of Rust type to FFI tag")

    aliases: Dict[str, str] = {}
    for raw_key, raw_tag in value.items():
        key = _as_str(raw_key)
        tag = _as_str(raw_tag)
        if not key or not tag:
            raise ConfigError(f"Invalid type alias entry: {raw_key!r}: {raw_tag!r}")
        if tag not in KNOWN_TAGS:
            raise ConfigError(f"type alias {key!r} targets unknown FFI type {tag!r}")
        try:
            aliases[normalize_type(key)] = tag
        except SignatureParseError as exc:
            raise ConfigError(f"Invalid Rust type in type_aliases: {key!r} ({exc})") from exc
    return aliases


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["BunbindConfig", "CONFIG_FILENAME", "ConfigError", "load_config"]
