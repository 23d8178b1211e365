"""Cross-run audit ledger of every key the pipeline has observed.

The ledger only grows: a run upserts the keys it observed and leaves every
other entry exactly as it was.

Observations come from the diff report buckets:

    unchanged   -> processed
    new, stale  -> pending
    orphan      -> orphan
    unknown     -> unknown

Execution results are applied on top: ``success`` marks the key processed,
``failed`` and ``skipped`` keep it pending with a ``"failed: <error>"`` or
``"skipped: <error>"`` reason.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from recallsync.core.log import get_logger
from recallsync.models import (
    LEDGER_STATUSES,
    DiffEntry,
    DiffReport,
    Ledger,
    LedgerEntry,
    LedgerStats,
    LedgerStatus,
    SyncItemResult,
    SyncPlan,
    SyncPlanItem,
)

logger = get_logger(__name__)

STATUS_BY_DIFF: dict[str, LedgerStatus] = {
    "unchanged": "processed",
    "new": "pending",
    "stale": "pending",
    "orphan": "orphan",
    "unknown": "unknown",
}

_CARRIED_FIELDS = (
    "session_id",
    "project_id",
    "source_fingerprint",
    "source_updated_at",
    "summary_fingerprint",
    "summary_path",
    "summary_generated_at",
)
_WHITESPACE = re.compile(r"\s+")


def new_ledger(plan: SyncPlan, processed_version: int, now: str) -> Ledger:
    return Ledger(
        processed_version=processed_version,
        generated_at=now,
        index_file=plan.index_file,
        summary_dir=plan.summary_dir,
    )


def compute_ledger_stats(entries: Mapping[str, LedgerEntry]) -> LedgerStats:
    counts = dict.fromkeys(LEDGER_STATUSES, 0)
    for entry in entries.values():
        counts[entry.status] += 1
    return LedgerStats(**counts)


def _carried(observed: DiffEntry | SyncPlanItem, existing: LedgerEntry | None) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for name in _CARRIED_FIELDS:
        value = getattr(observed, name, None)
        if value is None and existing is not None:
            value = getattr(existing, name)
        fields[name] = value
    return fields


def _prior_processed_at(existing: LedgerEntry | None) -> str | None:
    return existing.processed_at if existing else None


def observe_diff_entry(existing: LedgerEntry | None, entry: DiffEntry, now: str) -> LedgerEntry:
    status = STATUS_BY_DIFF[entry.status]
    processed_at = _prior_processed_at(existing)
    already_processed = existing is not None and existing.status == "processed"
    if status == "processed" and not (already_processed and processed_at):
        processed_at = entry.summary_generated_at or processed_at or now
    return LedgerEntry(
        key=entry.key,
        status=status,
        reason=entry.reason,
        processed_at=processed_at,
        verified_at=now,
        **_carried(entry, existing),
    )


def observe_plan_item(existing: LedgerEntry | None, item: SyncPlanItem, now: str) -> LedgerEntry:
    return LedgerEntry(
        key=item.key,
        status="pending",
        reason=item.reason,
        processed_at=_prior_processed_at(existing),
        verified_at=now,
        **_carried(item, existing),
    )


def _result_reason(result: SyncItemResult) -> str:
    detail = _WHITESPACE.sub(" ", result.error or "").strip()
    return f"{result.status}: {detail}" if detail else result.status


def apply_result(existing: LedgerEntry | None, result: SyncItemResult, now: str) -> LedgerEntry:
    fields = _carried(result.item, existing)
    if result.status == "success":
        return LedgerEntry(
            key=result.item.key,
            status="processed",
            reason="processed",
            processed_at=now,
            verified_at=now,
            **fields,
        )
    return LedgerEntry(
        key=result.item.key,
        status="pending",
        reason=_result_reason(result),
        processed_at=_prior_processed_at(existing),
        verified_at=now,
        **fields,
    )


def merge_ledger(
    ledger: Ledger,
    *,
    results: Iterable[SyncItemResult],
    now: str,
    report: DiffReport | None = None,
    plan: SyncPlan | None = None,
    processed_version: int | None = None,
) -> Ledger:
    """Fold one run's observations and results into ``ledger``.

    Observations come from ``report`` when it is available, otherwise from
    the ``plan`` items. Keys the run did not observe are carried forward
    unchanged and the stats are recounted over the whole merged mapping.
    """
    entries = dict(ledger.entries)
    observed = 0
    if report is not None:
        for entry in report.iter_entries():
            entries[entry.key] = observe_diff_entry(entries.get(entry.key), entry, now)
            observed += 1
    elif plan is not None:
        for item in plan.items:
            entries[item.key] = observe_plan_item(entries.get(item.key), item, now)
            observed += 1
    for result in results:
        entries[result.item.key] = apply_result(entries.get(result.item.key), result, now)
        observed += 1

    stats = compute_ledger_stats(entries)
    logger.info("ledger merged", observed=observed, entries=len(entries), **stats.model_dump())
    return ledger.model_copy(
        update={
            "processed_version": processed_version if processed_version is not None else ledger.processed_version,
            "generated_at": now,
            "entries": entries,
            "stats": stats,
        }
    )


__all__ = [
    "STATUS_BY_DIFF",
    "new_ledger",
    "compute_ledger_stats",
    "observe_diff_entry",
    "observe_plan_item",
    "apply_result",
    "merge_ledger",
]
