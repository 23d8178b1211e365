from __future__ import annotations

from pathlib import Path

import pytest

from recallsync.sync import run_sync_plan
from recallsync.sync.runner import (
    GLOBAL_SCOPE_WARNING,
    adjust_template_for_scope,
    apply_template,
    build_sync_log_record,
    limit_plan_items,
    run_command,
)
from tests.factories import make_plan, make_plan_item

FAIL_ON_B = "echo {session_id} >> ran.txt && test {session_id} != ses_b"


def _ran(cwd: Path) -> list[str]:
    path = cwd / "ran.txt"
    return path.read_text().split() if path.exists() else []


def _three_item_plan():
    return make_plan([make_plan_item("ses_a"), make_plan_item("ses_b"), make_plan_item("ses_c")])


def test_apply_template_substitutes_every_placeholder():
    item = make_plan_item("ses_1", "proj_a")

    command = apply_template("run {session_id} --p {project_id} --k {key} {session_id}", item)

    assert command == "run ses_1 --p proj_a --k proj_a:ses_1 ses_1"


def test_fail_fast_stops_after_first_failure(tmp_path):
    run = run_sync_plan(
        _three_item_plan(),
        plan_path=tmp_path / "plan.json",
        command_template=FAIL_ON_B,
        cwd=tmp_path,
        fail_fast=True,
    )

    assert [(r.item.session_id, r.status) for r in run.results] == [("ses_a", "success"), ("ses_b", "failed")]
    assert run.results[1].error == "exit code 1"
    assert _ran(tmp_path) == ["ses_a", "ses_b"]
    assert run.summary.success == 1
    assert run.summary.failed == 1


def test_without_fail_fast_every_item_runs(tmp_path):
    run = run_sync_plan(
        _three_item_plan(),
        plan_path=tmp_path / "plan.json",
        command_template=FAIL_ON_B,
        cwd=tmp_path,
    )

    assert [r.status for r in run.results] == ["success", "failed", "success"]
    assert _ran(tmp_path) == ["ses_a", "ses_b", "ses_c"]


def test_dry_run_expands_commands_without_running(tmp_path):
    run = run_sync_plan(
        _three_item_plan(),
        plan_path=tmp_path / "plan.json",
        command_template=FAIL_ON_B,
        cwd=tmp_path,
        dry_run=True,
    )

    assert run.dry_run is True
    assert [r.status for r in run.results] == ["skipped"] * 3
    assert {r.error for r in run.results} == {"dry-run"}
    assert run.results[0].command == "echo ses_a >> ran.txt && test ses_a != ses_b"
    assert _ran(tmp_path) == []


def test_missing_template_skips_every_item(tmp_path):
    run = run_sync_plan(_three_item_plan(), plan_path=tmp_path / "plan.json", cwd=tmp_path)

    assert run.dry_run is True
    assert run.summary.skipped == 3
    assert all(r.command is None and r.error == "missing-command-template" for r in run.results)


def test_limit_truncates_plan(tmp_path):
    run = run_sync_plan(
        _three_item_plan(),
        plan_path=tmp_path / "plan.json",
        command_template="true",
        cwd=tmp_path,
        limit=2,
    )

    assert [r.item.session_id for r in run.results] == ["ses_a", "ses_b"]
    assert limit_plan_items(_three_item_plan().items, None) == _three_item_plan().items


def test_empty_plan_is_a_noop(tmp_path):
    run = run_sync_plan(make_plan([]), plan_path=tmp_path / "plan.json", command_template="false", cwd=tmp_path)

    assert run.results == []
    assert run.summary.model_dump() == {"success": 0, "failed": 0, "skipped": 0}


def test_run_command_reports_exit_code(tmp_path):
    assert run_command("true", tmp_path).ok is True
    outcome = run_command("exit 3", tmp_path)
    assert outcome.ok is False
    assert outcome.code == 3
    assert outcome.error == "exit code 3"


def test_run_command_reports_missing_cwd(tmp_path):
    outcome = run_command("true", tmp_path / "missing")

    assert outcome.ok is False
    assert outcome.code is None
    assert outcome.error


@pytest.mark.parametrize(
    "template,expected,appended,warned",
    [
        ("summarize {session_id}", "summarize {session_id} --project {project_id}", True, False),
        ("summarize {session_id} --project {project_id}", "summarize {session_id} --project {project_id}", False, False),
        ("summarize {session_id} --project proj_a", "summarize {session_id} --project proj_a", False, True),
        ("summarize {session_id} --project-id=proj_a", "summarize {session_id} --project-id=proj_a", False, True),
        ("summarize {session_id} --projects", "summarize {session_id} --projects --project {project_id}", True, False),
    ],
)
def test_global_scope_template_adjustment(template, expected, appended, warned):
    plan = make_plan([make_plan_item("ses_1", "global")], include_global=True)

    adjustment = adjust_template_for_scope(template, plan)

    assert adjustment.template == expected
    assert adjustment.appended is appended
    assert (adjustment.warning == GLOBAL_SCOPE_WARNING) is warned


def test_template_untouched_without_global_scope():
    plan = make_plan([make_plan_item("ses_1")])

    adjustment = adjust_template_for_scope("summarize {session_id}", plan)

    assert adjustment.template == "summarize {session_id}"
    assert adjustment.appended is False
    assert adjustment.warning is None


def test_global_items_receive_their_project_id(tmp_path):
    plan = make_plan([make_plan_item("ses_1", "global")], include_global=True)

    run = run_sync_plan(plan, plan_path=tmp_path / "p.json", command_template="echo {session_id}", cwd=tmp_path, dry_run=True)

    assert run.command_appended is True
    assert run.results[0].command == "echo ses_1 --project global"


def test_sync_log_record_describes_the_run(tmp_path):
    run = run_sync_plan(_three_item_plan(), plan_path=tmp_path / "plan.json", cwd=tmp_path)

    record = build_sync_log_record(
        run,
        generated_at="2026-02-20T00:00:00.000Z",
        ledger_path=tmp_path / "state.json",
        ledger_written=False,
        fail_fast=False,
        limit=None,
        cwd=tmp_path,
        processed_version=1,
    )

    assert record["items_processed"] == 3
    assert record["summary"] == {"success": 0, "failed": 0, "skipped": 3}
    assert record["dry_run"] is True
    assert record["results"][0]["item"]["key"] == "proj_a:ses_a"
    assert record["ledger_written"] is False
