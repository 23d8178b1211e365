from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from recallsync.core import json as json_util
from recallsync.errors import ConfigError
from recallsync.paths import (
    SUMMARY_EXTENSION,
    SUMMARY_PREFIX,
    config_root,
    resolve_data_root,
    resolve_source_db_path,
)

CONFIG_VERSION = 1
DEFAULT_CONFIG_NAME = "config.json"
DEFAULT_PROCESSED_VERSION = 1

_ALLOWED_KEYS = {
    "version",
    "data_root",
    "db_path",
    "summary_dir",
    "summary_prefix",
    "summary_extension",
    "processed_version",
}


@dataclass
class Config:
    version: int
    data_root: Path
    db_path: Path
    summary_dir: Optional[Path]
    summary_prefix: str
    summary_extension: str
    processed_version: int
    path: Path

    def as_dict(self) -> dict:
        payload: dict[str, Any] = {
            "version": self.version,
            "data_root": str(self.data_root),
            "db_path": str(self.db_path),
            "summary_prefix": self.summary_prefix,
            "summary_extension": self.summary_extension,
            "processed_version": self.processed_version,
        }
        if self.summary_dir is not None:
            payload["summary_dir"] = str(self.summary_dir)
        return payload


def config_path(explicit: Optional[Path] = None) -> Path:
    env_path = os.environ.get("RECALLSYNC_CONFIG")
    if explicit:
        return explicit.expanduser()
    if env_path:
        return Path(env_path).expanduser()
    return config_root() / "recallsync" / DEFAULT_CONFIG_NAME


def _ensure_keys(data: dict, *, allowed: Iterable[str]) -> None:
    unknown = set(data.keys()) - set(allowed)
    if unknown:
        keys = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown config key(s): {keys}")


def _optional_str(raw: dict, key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config '{key}' must be a non-empty string")
    return value.strip()


def _positive_int(raw: dict, key: str, default: int) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"Config '{key}' must be a positive integer")
    return value


def parse_config(raw: Any, *, path: Path) -> Config:
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a JSON object")
    _ensure_keys(raw, allowed=_ALLOWED_KEYS)
    version = _positive_int(raw, "version", CONFIG_VERSION)
    if version != CONFIG_VERSION:
        raise ConfigError(f"Unsupported config version {version} (expected {CONFIG_VERSION})")
    summary_dir = _optional_str(raw, "summary_dir")
    return Config(
        version=version,
        data_root=resolve_data_root(_optional_str(raw, "data_root")),
        db_path=resolve_source_db_path(_optional_str(raw, "db_path")),
        summary_dir=Path(summary_dir).expanduser() if summary_dir else None,
        summary_prefix=_optional_str(raw, "summary_prefix") or SUMMARY_PREFIX,
        summary_extension=_optional_str(raw, "summary_extension") or SUMMARY_EXTENSION,
        processed_version=_positive_int(raw, "processed_version", DEFAULT_PROCESSED_VERSION),
        path=path,
    )


def default_config(path: Optional[Path] = None) -> Config:
    return parse_config({}, path=path or config_path())


def load_config(path: Optional[Path] = None) -> Config:
    """Load the config file, falling back to defaults when it does not exist."""
    target = config_path(path)
    if not target.exists():
        if path is not None:
            raise ConfigError(f"Config file not found: {target}")
        return default_config(target)
    try:
        raw = json_util.loads(target.read_bytes())
    except json_util.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {target}: {exc}") from exc
    return parse_config(raw, path=target)


__all__ = [
    "CONFIG_VERSION",
    "DEFAULT_PROCESSED_VERSION",
    "Config",
    "ConfigError",
    "config_path",
    "parse_config",
    "default_config",
    "load_config",
]
