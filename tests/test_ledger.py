from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from recallsync.models import DiffReport, Ledger, SyncItemResult
from recallsync.sync import merge_ledger, new_ledger
from tests.factories import make_diff_entry, make_plan, make_plan_item

T1 = "2026-02-20T00:00:00.000Z"
T2 = "2026-02-21T00:00:00.000Z"


def _report(**buckets):
    return DiffReport(generated_at=T1, **buckets)


def _empty_ledger():
    return new_ledger(make_plan([]), 1, T1)


def test_report_buckets_map_to_ledger_statuses():
    report = _report(
        new=[make_diff_entry("new", session_id="ses_new", reason="missing-summary")],
        stale=[make_diff_entry("stale", session_id="ses_stale")],
        unchanged=[make_diff_entry("unchanged", session_id="ses_done", summary_generated_at="2026-02-11T00:00:00.000Z")],
        orphan=[make_diff_entry("orphan", session_id="ses_orphan")],
        unknown=[make_diff_entry("unknown", session_id="ses_unknown")],
    )

    ledger = merge_ledger(_empty_ledger(), results=[], now=T1, report=report)

    statuses = {key: entry.status for key, entry in ledger.entries.items()}
    assert statuses == {
        "proj_a:ses_new": "pending",
        "proj_a:ses_stale": "pending",
        "proj_a:ses_done": "processed",
        "proj_a:ses_orphan": "orphan",
        "proj_a:ses_unknown": "unknown",
    }
    assert ledger.entries["proj_a:ses_done"].processed_at == "2026-02-11T00:00:00.000Z"
    assert ledger.entries["proj_a:ses_new"].reason == "missing-summary"
    assert ledger.stats.model_dump() == {"processed": 1, "pending": 2, "orphan": 1, "unknown": 1}


def test_results_override_observations():
    items = [make_plan_item("ses_ok"), make_plan_item("ses_bad"), make_plan_item("ses_dry")]
    plan = make_plan(items)
    results = [
        SyncItemResult(item=items[0], status="success", command="run ses_ok"),
        SyncItemResult(item=items[1], status="failed", command="run ses_bad", error="exit code 2"),
        SyncItemResult(item=items[2], status="skipped", error="dry-run"),
    ]

    ledger = merge_ledger(_empty_ledger(), results=results, now=T2, plan=plan)

    ok = ledger.entries["proj_a:ses_ok"]
    assert ok.status == "processed"
    assert ok.processed_at == T2
    assert ok.verified_at == T2
    assert ledger.entries["proj_a:ses_bad"].status == "pending"
    assert ledger.entries["proj_a:ses_bad"].reason == "failed: exit code 2"
    assert ledger.entries["proj_a:ses_dry"].reason == "skipped: dry-run"


def test_failure_reason_collapses_whitespace():
    item = make_plan_item("ses_bad")
    result = SyncItemResult(item=item, status="failed", error="line one\n  line\ttwo ")

    ledger = merge_ledger(_empty_ledger(), results=[result], now=T1)

    assert ledger.entries[item.key].reason == "failed: line one line two"


def test_unobserved_entries_are_preserved_untouched():
    report = _report(orphan=[make_diff_entry("orphan", session_id="ses_old")])
    first = merge_ledger(_empty_ledger(), results=[], now=T1, report=report)

    second = merge_ledger(first, results=[], now=T2, report=_report(new=[make_diff_entry("new", session_id="ses_x")]))

    assert second.entries["proj_a:ses_old"] == first.entries["proj_a:ses_old"]
    assert second.entries["proj_a:ses_old"].verified_at == T1
    assert second.entries["proj_a:ses_x"].verified_at == T2
    assert second.stats.orphan == 1
    assert second.stats.pending == 1
    assert second.generated_at == T2


def test_failed_retry_keeps_earlier_processed_at_and_fields():
    item = make_plan_item("ses_1", summary_path="/s/a.md")
    first = merge_ledger(
        _empty_ledger(), results=[SyncItemResult(item=item, status="success")], now=T1
    )
    bare = make_plan_item("ses_1")

    second = merge_ledger(first, results=[SyncItemResult(item=bare, status="failed", error="boom")], now=T2)

    entry = second.entries["proj_a:ses_1"]
    assert entry.status == "pending"
    assert entry.processed_at == T1
    assert entry.summary_path == "/s/a.md"


def test_processed_version_is_updated():
    ledger = merge_ledger(_empty_ledger(), results=[], now=T1, processed_version=3)

    assert ledger.processed_version == 3
    assert merge_ledger(ledger, results=[], now=T2).processed_version == 3


_keys = st.sampled_from([f"ses_{n}" for n in range(6)])
_statuses = st.sampled_from(["new", "stale", "unchanged", "orphan", "unknown"])


@settings(max_examples=50)
@given(runs=st.lists(st.dictionaries(_keys, _statuses, max_size=6), min_size=1, max_size=4))
def test_ledger_keys_only_grow(runs):
    ledger: Ledger = _empty_ledger()
    seen: set[str] = set()
    for run in runs:
        buckets: dict[str, list] = {}
        for session_id, status in run.items():
            buckets.setdefault(status, []).append(make_diff_entry(status, session_id=session_id))
        before = set(ledger.entries)
        ledger = merge_ledger(ledger, results=[], now=T1, report=_report(**buckets))
        seen |= {f"proj_a:{session_id}" for session_id in run}
        assert before <= set(ledger.entries)
        assert set(ledger.entries) == seen
        assert sum(ledger.stats.model_dump().values()) == len(ledger.entries)


def test_already_processed_key_keeps_processed_at():
    item = make_plan_item("ses_1")
    first = merge_ledger(
        _empty_ledger(), results=[SyncItemResult(item=item, status="success")], now="2026-02-12T10:00:00.000Z"
    )
    report = _report(
        unchanged=[make_diff_entry("unchanged", session_id="ses_1", summary_generated_at="2026-02-12T09:59:00.000Z")]
    )

    second = merge_ledger(first, results=[], now=T2, report=report)

    entry = second.entries["proj_a:ses_1"]
    assert entry.status == "processed"
    assert entry.processed_at == "2026-02-12T10:00:00.000Z"
    assert entry.verified_at == T2
    assert entry.summary_generated_at == "2026-02-12T09:59:00.000Z"


def test_transition_to_processed_uses_summary_time():
    first = merge_ledger(
        _empty_ledger(), results=[], now=T1, report=_report(stale=[make_diff_entry("stale", session_id="ses_1")])
    )
    report = _report(
        unchanged=[make_diff_entry("unchanged", session_id="ses_1", summary_generated_at="2026-02-20T12:00:00.000Z")]
    )

    second = merge_ledger(first, results=[], now=T2, report=report)

    assert first.entries["proj_a:ses_1"].processed_at is None
    assert second.entries["proj_a:ses_1"].processed_at == "2026-02-20T12:00:00.000Z"
