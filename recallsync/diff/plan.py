"""Turn a diff report into an executable sync plan."""

from __future__ import annotations

from pathlib import Path

from recallsync.core.timestamps import now_iso
from recallsync.models import DiffEntry, DiffReport, SyncPlan, SyncPlanItem, SyncPlanStats


def _plan_item(entry: DiffEntry) -> SyncPlanItem:
    return SyncPlanItem(
        key=entry.key,
        session_id=entry.session_id or "",
        project_id=entry.project_id or "",
        title=entry.title,
        status="stale" if entry.status == "stale" else "new",
        reason=entry.reason,
        source_fingerprint=entry.source_fingerprint,
        source_updated_at=entry.source_updated_at,
        summary_fingerprint=entry.summary_fingerprint,
        summary_generated_at=entry.summary_generated_at,
        summary_path=entry.summary_path,
    )


def build_sync_plan(report: DiffReport, report_file: Path | str | None = None) -> SyncPlan:
    """Collect the ``new`` then ``stale`` entries that a per-session command can address.

    Entries without both a session id and a project id are dropped, so the
    plan's counts are recomputed rather than copied from the report.
    """
    items = [
        _plan_item(entry)
        for entry in [*report.new, *report.stale]
        if entry.session_id and entry.project_id
    ]
    return SyncPlan(
        generated_at=now_iso(),
        index_file=report.index_file,
        summary_dir=report.summary_dir,
        report_file=str(report_file) if report_file else None,
        project_scope=report.project_scope,
        stats=SyncPlanStats(
            total=len(items),
            new=sum(1 for item in items if item.status == "new"),
            stale=sum(1 for item in items if item.status == "stale"),
        ),
        items=items,
    )


__all__ = ["build_sync_plan"]
