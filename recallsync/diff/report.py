"""Classify every key of the source and summary indexes into a diff report.

Decision order for a key:

1. summary only                         -> orphan    (missing-source)
2. source only                          -> new       (missing-summary)
3. either side lacks a usable timestamp -> unknown   (missing-timestamp)
4. source activity newer than summary   -> stale     (source-newer)
5. otherwise                            -> unchanged (summary-current)

Each status list is ordered by latest timestamp descending, then key
ascending. Sync planning and ledger merging iterate these lists, so the
order must be reproducible.
"""

from __future__ import annotations

from pathlib import Path

from recallsync.core.log import get_logger
from recallsync.core.timestamps import now_iso, parse_timestamp_ms
from recallsync.models import (
    DIFF_STATUSES,
    DiffEntry,
    DiffReport,
    DiffStats,
    DiffStatus,
    ProjectScope,
    SourceEntry,
    SourceIndex,
    SummaryEntry,
    SummaryIndex,
)
from recallsync.summaries.index import summary_recency_ms

logger = get_logger(__name__)

MISSING_SOURCE = "missing-source"
MISSING_SUMMARY = "missing-summary"
MISSING_TIMESTAMP = "missing-timestamp"
SOURCE_NEWER = "source-newer"
SUMMARY_CURRENT = "summary-current"


def source_latest_ms(entry: SourceEntry) -> int | None:
    """Latest observed activity for a session, or None if nothing is known."""
    candidates = [
        value
        for value in (
            parse_timestamp_ms(entry.updated_at),
            entry.session_mtime_ms,
            entry.message_latest_mtime_ms,
            entry.part_latest_mtime_ms,
        )
        if value is not None
    ]
    return max(candidates) if candidates else None


def build_diff_entry(
    source: SourceEntry | None,
    summary: SummaryEntry | None,
    status: DiffStatus,
    reason: str | None,
) -> DiffEntry:
    return DiffEntry(
        key=source.key if source else summary.key if summary else "unknown",
        session_id=source.session_id if source else summary.session_id if summary else None,
        project_id=source.project_id if source else summary.project_id if summary else None,
        title=source.title if source else None,
        status=status,
        reason=reason,
        source_fingerprint=source.fingerprint if source else None,
        source_updated_at=source.updated_at if source else None,
        source_latest_ms=source_latest_ms(source) if source else None,
        summary_fingerprint=summary.summary_fingerprint if summary else None,
        summary_generated_at=summary.summary_generated_at if summary else None,
        summary_mtime_ms=summary.summary_mtime_ms if summary else None,
        summary_path=summary.summary_path if summary else None,
    )


def classify(source: SourceEntry | None, summary: SummaryEntry | None) -> DiffEntry:
    if source is None:
        if summary is None:
            raise ValueError("classify() needs at least one side")
        return build_diff_entry(None, summary, "orphan", MISSING_SOURCE)
    if summary is None:
        return build_diff_entry(source, None, "new", MISSING_SUMMARY)

    source_ms = source_latest_ms(source)
    summary_ms = summary_recency_ms(summary)
    if source_ms is None or summary_ms is None:
        return build_diff_entry(source, summary, "unknown", MISSING_TIMESTAMP)
    if source_ms > summary_ms:
        return build_diff_entry(source, summary, "stale", SOURCE_NEWER)
    return build_diff_entry(source, summary, "unchanged", SUMMARY_CURRENT)


def _sort_key(entry: DiffEntry) -> tuple[int, str]:
    latest = entry.source_latest_ms if entry.source_latest_ms is not None else entry.summary_mtime_ms
    return (-(latest or 0), entry.key)


def sort_entries(entries: list[DiffEntry]) -> list[DiffEntry]:
    return sorted(entries, key=_sort_key)


def build_diff_report(
    source_index: SourceIndex,
    summary_index: SummaryIndex,
    summary_dir: Path | str,
    project_scope: ProjectScope,
) -> DiffReport:
    """Cross-reference both indexes; every key lands in exactly one list."""
    sources = source_index.sessions
    summaries = summary_index.summaries

    classified = [classify(entry, summaries.get(key)) for key, entry in sources.items()]
    classified.extend(classify(None, entry) for key, entry in summaries.items() if key not in sources)

    buckets: dict[DiffStatus, list[DiffEntry]] = {status: [] for status in DIFF_STATUSES}
    for entry in classified:
        buckets[entry.status].append(entry)
    ordered = {status: sort_entries(entries) for status, entries in buckets.items()}

    stats = DiffStats(
        source_sessions=len(sources),
        local_summaries=len(summaries),
        local_duplicates=len(summary_index.duplicates),
        **{status: len(entries) for status, entries in ordered.items()},
    )
    logger.info("diff report built", **{status: len(entries) for status, entries in ordered.items()})
    return DiffReport(
        generated_at=now_iso(),
        index_file=source_index.index_file,
        summary_dir=str(summary_dir),
        project_scope=project_scope,
        stats=stats,
        duplicates=list(summary_index.duplicates),
        **ordered,
    )


__all__ = [
    "MISSING_SOURCE",
    "MISSING_SUMMARY",
    "MISSING_TIMESTAMP",
    "SOURCE_NEWER",
    "SUMMARY_CURRENT",
    "source_latest_ms",
    "build_diff_entry",
    "classify",
    "sort_entries",
    "build_diff_report",
]
