"""Build the source index from the OpenCode session store."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from recallsync.core.hashing import hash_fields
from recallsync.core.log import get_logger
from recallsync.core.timestamps import ms_to_iso, now_iso
from recallsync.errors import SessionNotFoundError
from recallsync.models import (
    SourceEntry,
    SourceFilters,
    SourceIndex,
    SourceProject,
    SourceStats,
    make_key,
)
from recallsync.sources.store import ProjectRow, SessionRow, SessionStats, SourceStore

logger = get_logger(__name__)


def build_session_fingerprint(fields: Sequence[str | int | float | None]) -> str:
    """Fingerprint a session snapshot.

    Any change to an identity field, a count or a timestamp changes the
    fingerprint. Unrelated stat churn (e.g. summary additions) changes it too.
    """
    return hash_fields(fields)


def fingerprint_fields(session: SessionRow, stats: SessionStats) -> tuple[str | int | None, ...]:
    return (
        session.id,
        session.project_id,
        session.slug,
        session.title,
        session.directory,
        session.version,
        session.summary_additions,
        session.summary_deletions,
        session.summary_files,
        session.time_created,
        session.time_updated,
        stats.message_count,
        stats.part_count,
        stats.message_latest_ms,
        stats.part_latest_ms,
    )


def build_session_entry(
    session: SessionRow,
    project: ProjectRow | None,
    stats: SessionStats,
    db_path: Path | str,
) -> SourceEntry:
    return SourceEntry(
        key=make_key(session.project_id, session.id),
        session_id=session.id,
        project_id=session.project_id,
        title=session.title,
        slug=session.slug,
        directory=session.directory or (project.worktree if project else None),
        created_at=ms_to_iso(session.time_created),
        updated_at=ms_to_iso(session.time_updated),
        message_count=stats.message_count,
        part_count=stats.part_count,
        message_latest_mtime_ms=stats.message_latest_ms,
        part_latest_mtime_ms=stats.part_latest_ms,
        session_file=f"{db_path}#session:{session.id}",
        message_dir=None,
        session_mtime_ms=session.time_updated,
        fingerprint=build_session_fingerprint(fingerprint_fields(session, stats)),
    )


def _sort_entries(entries: list[SourceEntry]) -> list[SourceEntry]:
    # created_at descending, then key ascending; missing created_at sorts last
    by_key = sorted(entries, key=lambda entry: entry.key)
    return sorted(by_key, key=lambda entry: entry.created_at or "", reverse=True)


def build_source_index(
    store: SourceStore,
    *,
    data_root: Path,
    index_file: Path,
    project_id: str | None = None,
    session_id: str | None = None,
) -> SourceIndex:
    """Snapshot every qualifying session into a fresh source index.

    A project filter that matches nothing produces an empty index.

    Raises:
        SessionNotFoundError: ``session_id`` was given and no session matched.
        SourceStoreError: the store could not be queried.
    """
    projects = {row.id: row for row in store.list_projects()}
    sessions = store.list_sessions(project_id=project_id, session_id=session_id)
    if session_id and not sessions:
        scope = f" in project {project_id}" if project_id else ""
        raise SessionNotFoundError(f"Session not found{scope}: {session_id}")

    message_stats = store.message_stats()
    part_stats = store.part_stats()

    entries = [
        build_session_entry(
            session,
            projects.get(session.project_id),
            SessionStats.combine(message_stats.get(session.id), part_stats.get(session.id)),
            store.db_path,
        )
        for session in sessions
    ]
    entries = _sort_entries(entries)
    for entry in entries:
        logger.debug("session indexed", key=entry.key, messages=entry.message_count)

    index = SourceIndex(
        generated_at=now_iso(),
        storage_root=str(store.db_path.parent),
        db_path=str(store.db_path),
        data_root=str(data_root),
        index_file=str(index_file),
        filters=SourceFilters(project_id=project_id, session_id=session_id),
        projects={pid: SourceProject(id=row.id, worktree=row.worktree) for pid, row in projects.items()},
        sessions={entry.key: entry for entry in entries},
        stats=SourceStats(project_count=len(projects), session_count=len(entries)),
    )
    logger.info("source index built", sessions=len(entries), projects=len(projects))
    return index


__all__ = [
    "build_session_fingerprint",
    "fingerprint_fields",
    "build_session_entry",
    "build_source_index",
]
