"""Execute a sync plan one item at a time.

Command templates are expanded by plain text replacement of ``{session_id}``,
``{project_id}`` and ``{key}``. No shell quoting is applied: the expanded
string is handed to the shell verbatim, so identifiers must stay shell-safe.
Commands run sequentially with no timeout; a hung command stalls the run.
"""

from __future__ import annotations

import re
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from recallsync.core.log import get_logger
from recallsync.models import SyncItemResult, SyncPlan, SyncPlanItem, SyncRunSummary

logger = get_logger(__name__)

PROJECT_FLAG_PATTERN = re.compile(r"--project(?:-id)?(?=\s|=|$)")
GLOBAL_SCOPE_WARNING = "Plan includes global sessions but command template does not reference {project_id}."

MISSING_TEMPLATE = "missing-command-template"
DRY_RUN = "dry-run"


@dataclass(frozen=True)
class TemplateAdjustment:
    template: str | None
    appended: bool = False
    warning: str | None = None


@dataclass(frozen=True)
class CommandOutcome:
    ok: bool
    code: int | None
    error: str | None


@dataclass
class SyncRunResult:
    plan: SyncPlan
    plan_path: Path
    command_template: str | None
    command_appended: bool
    warning: str | None
    dry_run: bool
    results: list[SyncItemResult] = field(default_factory=list)
    summary: SyncRunSummary = field(default_factory=SyncRunSummary)


def adjust_template_for_scope(template: str | None, plan: SyncPlan) -> TemplateAdjustment:
    """Make sure commands for a plan spanning the global scope receive a project id.

    When the template never mentions ``{project_id}``, ``--project {project_id}``
    is appended, unless the template already carries a project flag with a
    literal value; that case is ambiguous and only produces a warning.
    """
    if not template or not plan.project_scope.include_global:
        return TemplateAdjustment(template)
    if "{project_id}" in template:
        return TemplateAdjustment(template)
    if PROJECT_FLAG_PATTERN.search(template):
        return TemplateAdjustment(template, warning=GLOBAL_SCOPE_WARNING)
    return TemplateAdjustment(f"{template} --project {{project_id}}", appended=True)


def apply_template(template: str, item: SyncPlanItem) -> str:
    return (
        template.replace("{session_id}", item.session_id)
        .replace("{project_id}", item.project_id)
        .replace("{key}", item.key)
    )


def limit_plan_items(items: Sequence[SyncPlanItem], limit: int | None) -> list[SyncPlanItem]:
    if not limit or limit <= 0:
        return list(items)
    return list(items[:limit])


def run_command(command: str, cwd: Path) -> CommandOutcome:
    """Run ``command`` through the shell in ``cwd`` and wait for it to exit."""
    try:
        completed = subprocess.run(command, shell=True, cwd=cwd, check=False)
    except OSError as exc:
        return CommandOutcome(ok=False, code=None, error=str(exc))
    code = completed.returncode
    if code == 0:
        return CommandOutcome(ok=True, code=0, error=None)
    if code < 0:
        return CommandOutcome(ok=False, code=code, error=f"terminated by signal {-code}")
    return CommandOutcome(ok=False, code=code, error=f"exit code {code}")


def process_item(
    item: SyncPlanItem,
    *,
    command_template: str | None,
    cwd: Path,
    dry_run: bool,
) -> SyncItemResult:
    if not command_template:
        return SyncItemResult(item=item, status="skipped", command=None, error=MISSING_TEMPLATE)
    command = apply_template(command_template, item)
    if dry_run:
        return SyncItemResult(item=item, status="skipped", command=command, error=DRY_RUN)
    logger.debug("sync command started", key=item.key, command=command)
    outcome = run_command(command, cwd)
    status = "success" if outcome.ok else "failed"
    if not outcome.ok:
        logger.warning("sync command failed", key=item.key, error=outcome.error)
    return SyncItemResult(item=item, status=status, command=command, error=outcome.error)


def summarize_results(results: Iterable[SyncItemResult]) -> SyncRunSummary:
    counts = {"success": 0, "failed": 0, "skipped": 0}
    for result in results:
        counts[result.status] += 1
    return SyncRunSummary(**counts)


def run_sync_plan(
    plan: SyncPlan,
    *,
    plan_path: Path,
    command_template: str | None = None,
    cwd: Path | None = None,
    dry_run: bool = False,
    fail_fast: bool = False,
    limit: int | None = None,
) -> SyncRunResult:
    """Process plan items in order.

    Without a command template the run is a dry run. With ``fail_fast`` the
    loop stops right after the first failed item; later items are neither
    attempted nor recorded.
    """
    items = limit_plan_items(plan.items, limit)
    adjustment = adjust_template_for_scope(command_template, plan)
    template = adjustment.template
    effective_dry_run = dry_run or not template
    run_cwd = (cwd or Path.cwd()).resolve()

    results: list[SyncItemResult] = []
    for item in items:
        result = process_item(item, command_template=template, cwd=run_cwd, dry_run=effective_dry_run)
        results.append(result)
        if fail_fast and result.status == "failed":
            logger.info("sync stopped on failure", key=item.key, remaining=len(items) - len(results))
            break

    summary = summarize_results(results)
    logger.info(
        "sync run finished",
        success=summary.success,
        failed=summary.failed,
        skipped=summary.skipped,
        dry_run=effective_dry_run,
    )
    return SyncRunResult(
        plan=plan,
        plan_path=plan_path,
        command_template=template,
        command_appended=adjustment.appended,
        warning=adjustment.warning,
        dry_run=effective_dry_run,
        results=results,
        summary=summary,
    )


def build_sync_log_record(
    run: SyncRunResult,
    *,
    generated_at: str,
    ledger_path: Path,
    ledger_written: bool,
    fail_fast: bool,
    limit: int | None,
    cwd: Path,
    processed_version: int,
) -> dict[str, Any]:
    """One JSON-lines record describing a whole sync invocation."""
    return {
        "generated_at": generated_at,
        "plan_path": str(run.plan_path),
        "ledger_path": str(ledger_path),
        "command_template": run.command_template,
        "command_appended": run.command_appended,
        "warning": run.warning,
        "dry_run": run.dry_run,
        "fail_fast": fail_fast,
        "limit": limit,
        "cwd": str(cwd),
        "processed_version": processed_version,
        "items_processed": len(run.results),
        "summary": run.summary.model_dump(mode="json"),
        "results": [result.model_dump(mode="json") for result in run.results],
        "ledger_written": ledger_written,
    }


__all__ = [
    "PROJECT_FLAG_PATTERN",
    "GLOBAL_SCOPE_WARNING",
    "MISSING_TEMPLATE",
    "DRY_RUN",
    "TemplateAdjustment",
    "CommandOutcome",
    "SyncRunResult",
    "adjust_template_for_scope",
    "apply_template",
    "limit_plan_items",
    "run_command",
    "process_item",
    "summarize_results",
    "run_sync_plan",
    "build_sync_log_record",
]
