"""Shared filesystem paths for recallsync."""

from __future__ import annotations

import os
from pathlib import Path


def _xdg_path(env_var: str, fallback: Path) -> Path:
    raw = os.environ.get(env_var)
    if raw:
        return Path(raw).expanduser()
    return fallback


def config_root() -> Path:
    return _xdg_path("XDG_CONFIG_HOME", Path.home() / ".config")


def data_root() -> Path:
    return _xdg_path("XDG_DATA_HOME", Path.home() / ".local/share")


RECALL_SUBDIR = Path("recall") / "opencode"
DEFAULT_SUMMARY_SUBDIR = Path(".recall") / "opencode"

SOURCE_INDEX_FILE = "source-index.json"
DIFF_REPORT_FILE = "diff-report.json"
SYNC_PLAN_FILE = "sync-plan.json"
LEDGER_FILE = "state.json"
SYNC_LOG_FILE = "sync-log.jsonl"

SUMMARY_PREFIX = "OPENCODE-SUMMARY-"
SUMMARY_EXTENSION = ".md"


def _absolute(value: str | Path, base: Path | None = None) -> Path:
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return ((base or Path.cwd()) / path).resolve()


def resolve_data_root(value: str | Path | None = None) -> Path:
    """Return the recallsync data root ($XDG_DATA_HOME/recallsync by default)."""
    if value:
        return _absolute(value)
    return data_root() / "recallsync"


def resolve_source_db_path(value: str | Path | None = None) -> Path:
    """Return the OpenCode sqlite database path ($XDG_DATA_HOME/opencode/opencode.db by default)."""
    if value:
        return _absolute(value)
    return data_root() / "opencode" / "opencode.db"


def resolve_artifact_path(root: Path, value: str | Path | None, default_name: str) -> Path:
    """Resolve an artifact override against cwd, or default it under ``<root>/recall/opencode``."""
    if value:
        return _absolute(value)
    return root / RECALL_SUBDIR / default_name


def resolve_summary_dir(repo_path: Path, value: str | Path | None = None) -> Path:
    if not value:
        return (repo_path / DEFAULT_SUMMARY_SUBDIR).resolve()
    return _absolute(value, base=repo_path)


__all__ = [
    "RECALL_SUBDIR",
    "DEFAULT_SUMMARY_SUBDIR",
    "SOURCE_INDEX_FILE",
    "DIFF_REPORT_FILE",
    "SYNC_PLAN_FILE",
    "LEDGER_FILE",
    "SYNC_LOG_FILE",
    "SUMMARY_PREFIX",
    "SUMMARY_EXTENSION",
    "config_root",
    "data_root",
    "resolve_data_root",
    "resolve_source_db_path",
    "resolve_artifact_path",
    "resolve_summary_dir",
]
