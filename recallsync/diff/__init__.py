"""Diff classification, project scoping and sync planning."""

from recallsync.diff.plan import build_sync_plan
from recallsync.diff.report import build_diff_report, classify, source_latest_ms
from recallsync.diff.scope import (
    build_project_scope,
    filter_source_sessions,
    filter_summary_entries,
    resolve_project_id_for_repo,
)

__all__ = [
    "build_diff_report",
    "classify",
    "source_latest_ms",
    "build_sync_plan",
    "build_project_scope",
    "filter_source_sessions",
    "filter_summary_entries",
    "resolve_project_id_for_repo",
]
