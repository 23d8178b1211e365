import sys
from pathlib import Path

import pytest
import structlog

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tests.factories import OpencodeDbFactory


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@pytest.fixture
def xdg_env(tmp_path, monkeypatch):
    """Point every XDG root at the test's tmp dir."""
    for var, name in (
        ("XDG_CONFIG_HOME", "config"),
        ("XDG_DATA_HOME", "data"),
        ("XDG_STATE_HOME", "state"),
        ("XDG_CACHE_HOME", "cache"),
    ):
        path = tmp_path / name
        path.mkdir(parents=True, exist_ok=True)
        monkeypatch.setenv(var, str(path))
    monkeypatch.delenv("RECALLSYNC_CONFIG", raising=False)
    monkeypatch.setenv("RECALLSYNC_FORCE_PLAIN", "1")
    return tmp_path


@pytest.fixture
def opencode_db(xdg_env) -> OpencodeDbFactory:
    """An empty OpenCode-shaped database at the default location."""
    db_path = xdg_env / "data" / "opencode" / "opencode.db"
    return OpencodeDbFactory(db_path)


@pytest.fixture
def repo_dir(tmp_path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo
