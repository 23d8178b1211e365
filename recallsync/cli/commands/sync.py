"""Sync command - execute the sync plan and update the ledger."""

from __future__ import annotations

from pathlib import Path

import click

from recallsync.cli.formatting import format_result_line
from recallsync.cli.helpers import apply_verbosity, echo_json, fail, load_effective_config
from recallsync.cli.types import AppEnv
from recallsync.errors import RecallError
from recallsync.pipeline import SyncOutcome, run_sync


def _summary_lines(outcome: SyncOutcome) -> list[str]:
    run = outcome.run
    lines = [f"Plan file: {run.plan_path}"]
    if outcome.ledger_written:
        lines.append(f"Ledger file: {outcome.ledger_file}")
    lines.append(f"Sync log: {outcome.log_file}")
    if run.dry_run and not run.command_template:
        lines.append("Dry-run: missing --command, no execution performed.")
    lines += [
        f"Items processed: {len(run.results)}",
        f"- success: {run.summary.success}",
        f"- failed: {run.summary.failed}",
        f"- skipped: {run.summary.skipped}",
    ]
    return lines


def _json_payload(outcome: SyncOutcome) -> dict:
    run = outcome.run
    return {
        "plan_path": str(run.plan_path),
        "ledger_path": str(outcome.ledger_file),
        "log_path": str(outcome.log_file),
        "command_template": run.command_template,
        "command_appended": run.command_appended,
        "warning": run.warning,
        "dry_run": run.dry_run,
        "ledger_written": outcome.ledger_written,
        "summary": run.summary.model_dump(mode="json"),
        "results": [result.model_dump(mode="json") for result in run.results],
    }


@click.command("sync")
@click.option(
    "--plan",
    "plan_file",
    type=click.Path(path_type=Path),
    help="Sync plan file (default: <data-root>/recall/opencode/sync-plan.json)",
)
@click.option(
    "--ledger",
    "ledger_file",
    type=click.Path(path_type=Path),
    help="Ledger file (default: <data-root>/recall/opencode/state.json)",
)
@click.option("--no-ledger", is_flag=True, help="Skip writing ledger updates")
@click.option(
    "--log",
    "log_file",
    type=click.Path(path_type=Path),
    help="Sync log file (default: <data-root>/recall/opencode/sync-log.jsonl)",
)
@click.option("--data-root", type=click.Path(path_type=Path), help="Data root (default: $XDG_DATA_HOME/recallsync)")
@click.option("--command", "command_template", help="Command template (supports {session_id}, {project_id}, {key})")
@click.option("--cwd", type=click.Path(path_type=Path), help="Working directory for commands (default: cwd)")
@click.option("--dry-run", is_flag=True, help="Skip execution and ledger updates")
@click.option("--fail-fast", is_flag=True, help="Stop on first failure")
@click.option("--limit", type=click.IntRange(min=1), help="Limit number of items processed")
@click.option("--processed-version", type=click.IntRange(min=1), help="Ledger processed version")
@click.option("--json", "as_json", is_flag=True, help="Print the run result as JSON")
@click.option("--verbose", is_flag=True, help="Print per-item results")
@click.pass_obj
def sync_command(
    env: AppEnv,
    plan_file: Path | None,
    ledger_file: Path | None,
    no_ledger: bool,
    log_file: Path | None,
    data_root: Path | None,
    command_template: str | None,
    cwd: Path | None,
    dry_run: bool,
    fail_fast: bool,
    limit: int | None,
    processed_version: int | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Execute the sync plan."""
    apply_verbosity(env, verbose)
    try:
        config = load_effective_config(env)
        outcome = run_sync(
            config,
            data_root=data_root,
            plan_file=plan_file,
            ledger_file=ledger_file,
            log_file=log_file,
            command_template=command_template,
            cwd=cwd,
            dry_run=dry_run,
            fail_fast=fail_fast,
            limit=limit,
            processed_version=processed_version,
            write_ledger=not no_ledger,
        )
    except RecallError as exc:
        fail("sync", str(exc))

    if as_json:
        echo_json(_json_payload(outcome))
        return
    run = outcome.run
    if run.command_appended:
        env.ui.note("appended --project {project_id} to command template.")
    if run.warning:
        env.ui.warning(run.warning)
    if verbose:
        env.ui.lines(format_result_line(result) for result in run.results)
    env.ui.summary("Sync", _summary_lines(outcome))
