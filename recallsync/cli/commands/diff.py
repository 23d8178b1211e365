"""Diff command - classify sessions against local summaries and write a sync plan."""

from __future__ import annotations

from pathlib import Path

import click

from recallsync.cli.formatting import render_diff_report
from recallsync.cli.helpers import apply_verbosity, echo_json, fail, load_effective_config
from recallsync.cli.types import AppEnv
from recallsync.errors import RecallError
from recallsync.pipeline import run_diff


@click.command("diff")
@click.option(
    "--index",
    "index_file",
    type=click.Path(path_type=Path),
    help="Source index file (default: <data-root>/recall/opencode/source-index.json)",
)
@click.option("--data-root", type=click.Path(path_type=Path), help="Data root (default: $XDG_DATA_HOME/recallsync)")
@click.option("--repo", "repo_path", type=click.Path(path_type=Path), default=Path("."), help="Repo root (default: cwd)")
@click.option(
    "--summary-dir",
    "--summaries",
    "summary_dir",
    type=click.Path(path_type=Path),
    help="Summary dir (default: <repo>/.recall/opencode)",
)
@click.option("--limit", type=click.IntRange(min=1), default=10, show_default=True, help="Rows per section")
@click.option("--json", "as_json", is_flag=True, help="Print the diff report as JSON")
@click.option(
    "--report",
    "report_file",
    type=click.Path(path_type=Path),
    help="Report file (default: <data-root>/recall/opencode/diff-report.json)",
)
@click.option("--no-report", is_flag=True, help="Skip writing the report file")
@click.option(
    "--plan",
    "plan_file",
    type=click.Path(path_type=Path),
    help="Sync plan file (default: <data-root>/recall/opencode/sync-plan.json)",
)
@click.option("--no-plan", is_flag=True, help="Skip writing the sync plan file")
@click.option("--project", "project_id", help="Limit to a single project id")
@click.option("--include-global", is_flag=True, help="Include global sessions in scope")
@click.option("--verbose", is_flag=True, help="Debug logging")
@click.pass_obj
def diff_command(
    env: AppEnv,
    index_file: Path | None,
    data_root: Path | None,
    repo_path: Path,
    summary_dir: Path | None,
    limit: int,
    as_json: bool,
    report_file: Path | None,
    no_report: bool,
    plan_file: Path | None,
    no_plan: bool,
    project_id: str | None,
    include_global: bool,
    verbose: bool,
) -> None:
    """Compare summaries to the source index."""
    apply_verbosity(env, verbose)
    try:
        config = load_effective_config(env)
        outcome = run_diff(
            config,
            repo_path=repo_path,
            data_root=data_root,
            index_file=index_file,
            summary_dir=summary_dir,
            project_id=project_id,
            include_global=include_global,
            report_file=report_file,
            write_report=not no_report,
            plan_file=plan_file,
            write_plan=not no_plan,
        )
    except RecallError as exc:
        fail("diff", str(exc))

    if as_json:
        echo_json(outcome.report.model_dump(mode="json"))
        return
    if outcome.report_file is not None:
        env.ui.lines([f"Report file: {outcome.report_file}"])
    if outcome.plan_file is not None:
        env.ui.lines([f"Plan file: {outcome.plan_file}"])
    env.ui.lines(render_diff_report(outcome.report, limit))
