"""Read-only access to the OpenCode session store.

The store is an sqlite database with ``project``, ``session``, ``message`` and
``part`` tables. Callers acquire a :class:`SourceStore` handle with
:func:`open_source_store` and pass it explicitly; there is no module-level
connection cache.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from recallsync.core.log import get_logger
from recallsync.errors import SourceStoreError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectRow:
    id: str
    worktree: str | None


@dataclass(frozen=True)
class SessionRow:
    id: str
    project_id: str
    slug: str | None
    title: str | None
    directory: str | None
    version: str | None
    summary_additions: int | None
    summary_deletions: int | None
    summary_files: int | None
    time_created: int | None
    time_updated: int | None


@dataclass(frozen=True)
class ActivityStats:
    """Row count and latest ``time_updated`` for one session's messages or parts."""

    count: int = 0
    latest_ms: int | None = None


@dataclass(frozen=True)
class SessionStats:
    message_count: int = 0
    part_count: int = 0
    message_latest_ms: int | None = None
    part_latest_ms: int | None = None

    @classmethod
    def combine(cls, messages: ActivityStats | None, parts: ActivityStats | None) -> SessionStats:
        messages = messages or ActivityStats()
        parts = parts or ActivityStats()
        return cls(
            message_count=messages.count,
            part_count=parts.count,
            message_latest_ms=messages.latest_ms,
            part_latest_ms=parts.latest_ms,
        )


class SourceStore:
    """Query handle over an open read-only connection."""

    def __init__(self, conn: sqlite3.Connection, db_path: Path):
        self.conn = conn
        self.db_path = db_path

    def _query(self, sql: str, params: tuple[object, ...] = ()) -> list[sqlite3.Row]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise SourceStoreError(f"Query against {self.db_path} failed: {exc}") from exc

    def list_projects(self) -> list[ProjectRow]:
        rows = self._query("SELECT id, worktree FROM project")
        return [ProjectRow(id=row["id"], worktree=row["worktree"]) for row in rows]

    def list_sessions(self, project_id: str | None = None, session_id: str | None = None) -> list[SessionRow]:
        conditions: list[str] = []
        params: list[str] = []
        if project_id:
            conditions.append("project_id = ?")
            params.append(project_id)
        if session_id:
            conditions.append("id = ?")
            params.append(session_id)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = self._query(
            f"""
            SELECT id, project_id, slug, title, directory, version,
                   summary_additions, summary_deletions, summary_files,
                   time_created, time_updated
            FROM session
            {where}
            """,
            tuple(params),
        )
        return [SessionRow(**dict(row)) for row in rows]

    def _activity(self, table: str) -> dict[str, ActivityStats]:
        rows = self._query(
            f"SELECT session_id, COUNT(*) AS row_count, MAX(time_updated) AS latest_ms FROM {table} GROUP BY session_id"
        )
        return {
            row["session_id"]: ActivityStats(count=row["row_count"], latest_ms=row["latest_ms"])
            for row in rows
        }

    def message_stats(self) -> dict[str, ActivityStats]:
        return self._activity("message")

    def part_stats(self) -> dict[str, ActivityStats]:
        return self._activity("part")


@contextmanager
def open_source_store(db_path: Path) -> Iterator[SourceStore]:
    """Open the store read-only for the duration of one run.

    Raises:
        SourceStoreError: the database file is missing or cannot be opened.
    """
    db_path = db_path.expanduser().resolve()
    if not db_path.exists():
        raise SourceStoreError(f"OpenCode sqlite database not found: {db_path}. OpenCode 1.2.0+ is required.")
    try:
        conn = sqlite3.connect(f"{db_path.as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as exc:
        raise SourceStoreError(f"Cannot open OpenCode database {db_path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    logger.debug("source store opened", db_path=str(db_path))
    try:
        yield SourceStore(conn, db_path)
    finally:
        conn.close()


__all__ = [
    "ProjectRow",
    "SessionRow",
    "ActivityStats",
    "SessionStats",
    "SourceStore",
    "open_source_store",
]
