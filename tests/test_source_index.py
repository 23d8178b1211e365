from __future__ import annotations

import sqlite3

import pytest

from recallsync.errors import SessionNotFoundError, SourceStoreError
from recallsync.sources import build_source_index, open_source_store
from recallsync.sources.index import build_session_entry, fingerprint_fields
from recallsync.sources.store import ActivityStats, SessionRow, SessionStats
from recallsync.core.hashing import hash_text
from tests.factories import ms


def _build(db, tmp_path, **filters):
    with open_source_store(db.db_path) as store:
        return build_source_index(
            store,
            data_root=tmp_path / "data-root",
            index_file=tmp_path / "index.json",
            **filters,
        )


def _seed(db, worktree):
    db.add_project("proj_a", worktree)
    db.add_project("global")
    db.add_session("ses_old", "proj_a", created="2026-02-01T00:00:00Z", updated="2026-02-02T00:00:00Z")
    db.add_session("ses_new", "proj_a", created="2026-02-05T00:00:00Z", updated="2026-02-06T00:00:00Z")
    db.add_session("ses_glob", "global", created="2026-02-03T00:00:00Z", updated="2026-02-03T00:00:00Z")
    db.add_message("ses_new", updated="2026-02-07T00:00:00Z", parts=["2026-02-07T00:00:00Z", "2026-02-08T00:00:00Z"])
    db.add_message("ses_new", updated="2026-02-06T12:00:00Z")


def test_index_captures_sessions_and_activity(opencode_db, repo_dir, tmp_path):
    _seed(opencode_db, repo_dir)

    index = _build(opencode_db, tmp_path)

    assert index.version == 2
    assert index.stats.session_count == 3
    assert index.stats.project_count == 2
    entry = index.sessions["proj_a:ses_new"]
    assert entry.message_count == 2
    assert entry.part_count == 2
    assert entry.message_latest_mtime_ms == ms("2026-02-07T00:00:00Z")
    assert entry.part_latest_mtime_ms == ms("2026-02-08T00:00:00Z")
    assert entry.created_at == "2026-02-05T00:00:00.000Z"
    assert entry.updated_at == "2026-02-06T00:00:00.000Z"
    assert entry.session_mtime_ms == ms("2026-02-06T00:00:00Z")
    assert entry.session_file.endswith("#session:ses_new")
    assert entry.directory == str(repo_dir)

    quiet = index.sessions["proj_a:ses_old"]
    assert quiet.message_count == 0
    assert quiet.message_latest_mtime_ms is None


def test_index_orders_sessions_newest_first(opencode_db, repo_dir, tmp_path):
    _seed(opencode_db, repo_dir)

    index = _build(opencode_db, tmp_path)

    assert list(index.sessions) == ["proj_a:ses_new", "global:ses_glob", "proj_a:ses_old"]


def test_project_filter_limits_sessions(opencode_db, repo_dir, tmp_path):
    _seed(opencode_db, repo_dir)

    index = _build(opencode_db, tmp_path, project_id="global")

    assert list(index.sessions) == ["global:ses_glob"]
    assert index.filters.project_id == "global"


def test_unknown_project_filter_yields_empty_index(opencode_db, repo_dir, tmp_path):
    _seed(opencode_db, repo_dir)

    index = _build(opencode_db, tmp_path, project_id="nope")

    assert index.sessions == {}
    assert index.stats.session_count == 0


def test_missing_session_raises(opencode_db, repo_dir, tmp_path):
    _seed(opencode_db, repo_dir)

    with pytest.raises(SessionNotFoundError, match="ses_missing"):
        _build(opencode_db, tmp_path, session_id="ses_missing")


def test_fingerprint_changes_when_activity_changes(opencode_db, repo_dir, tmp_path):
    _seed(opencode_db, repo_dir)
    before = _build(opencode_db, tmp_path).sessions["proj_a:ses_old"].fingerprint
    again = _build(opencode_db, tmp_path).sessions["proj_a:ses_old"].fingerprint

    opencode_db.add_message("ses_old", updated="2026-02-09T00:00:00Z")
    after = _build(opencode_db, tmp_path).sessions["proj_a:ses_old"].fingerprint

    assert before == again
    assert before != after


def test_fingerprint_joins_fields_with_pipes():
    session = SessionRow(
        id="ses_1",
        project_id="proj_a",
        slug=None,
        title="T",
        directory=None,
        version="1.2.0",
        summary_additions=None,
        summary_deletions=None,
        summary_files=None,
        time_created=1,
        time_updated=2,
    )
    stats = SessionStats.combine(ActivityStats(count=3, latest_ms=4), None)

    entry = build_session_entry(session, None, stats, "/db")

    assert fingerprint_fields(session, stats)[-4:] == (3, 0, 4, None)
    assert entry.fingerprint == hash_text("ses_1|proj_a||T||1.2.0||||1|2|3|0|4|")
    assert entry.directory is None


def test_missing_database_raises(tmp_path):
    with pytest.raises(SourceStoreError, match="not found"):
        with open_source_store(tmp_path / "absent.db"):
            pass


def test_store_is_opened_read_only(opencode_db):
    opencode_db.add_project("proj_a")
    with open_source_store(opencode_db.db_path) as store:
        with pytest.raises(sqlite3.OperationalError):
            store.conn.execute("INSERT INTO project (id) VALUES ('x')")


def test_malformed_database_raises_store_error(tmp_path):
    db_path = tmp_path / "empty.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE unrelated (x INTEGER)")
    conn.commit()
    conn.close()
    with open_source_store(db_path) as store:
        with pytest.raises(SourceStoreError, match="failed"):
            store.list_projects()
