"""State shared by every command through click's context object."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from recallsync.ui import ConsoleFacade


@dataclass
class AppEnv:
    ui: ConsoleFacade
    config_path: Path | None = None
    json_logs: bool = False
