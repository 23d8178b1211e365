"""Stage orchestration: resolve paths, run a stage, persist its artifacts.

Each stage either returns a complete document (and writes it) or raises a
RecallError before writing anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from recallsync.artifacts import append_json_line, read_json_document, read_optional_document, write_json_file
from recallsync.config import Config
from recallsync.core.log import get_logger
from recallsync.core.timestamps import now_iso
from recallsync.diff.plan import build_sync_plan
from recallsync.diff.report import build_diff_report
from recallsync.diff.scope import build_project_scope, filter_source_sessions, filter_summary_entries
from recallsync.models import DiffReport, Ledger, SourceIndex, SyncPlan
from recallsync.paths import (
    DIFF_REPORT_FILE,
    LEDGER_FILE,
    SOURCE_INDEX_FILE,
    SYNC_LOG_FILE,
    SYNC_PLAN_FILE,
    resolve_artifact_path,
    resolve_data_root,
    resolve_source_db_path,
    resolve_summary_dir,
)
from recallsync.sources.index import build_source_index
from recallsync.sources.store import open_source_store
from recallsync.summaries.index import index_summary_entries, load_summary_entries
from recallsync.sync.ledger import merge_ledger, new_ledger
from recallsync.sync.runner import SyncRunResult, build_sync_log_record, run_sync_plan

logger = get_logger(__name__)


def _data_root(config: Config, override: str | Path | None) -> Path:
    return resolve_data_root(override) if override else config.data_root


@dataclass
class IndexOutcome:
    index: SourceIndex
    index_file: Path


@dataclass
class DiffOutcome:
    report: DiffReport
    plan: SyncPlan | None
    report_file: Path | None
    plan_file: Path | None


@dataclass
class SyncOutcome:
    run: SyncRunResult
    ledger: Ledger | None
    ledger_file: Path
    log_file: Path
    cwd: Path

    @property
    def ledger_written(self) -> bool:
        return self.ledger is not None


def run_index(
    config: Config,
    *,
    db_path: str | Path | None = None,
    data_root: str | Path | None = None,
    index_file: str | Path | None = None,
    project_id: str | None = None,
    session_id: str | None = None,
) -> IndexOutcome:
    root = _data_root(config, data_root)
    db = resolve_source_db_path(db_path) if db_path else config.db_path
    target = resolve_artifact_path(root, index_file, SOURCE_INDEX_FILE)
    with open_source_store(db) as store:
        index = build_source_index(
            store,
            data_root=root,
            index_file=target,
            project_id=project_id,
            session_id=session_id,
        )
    write_json_file(target, index)
    return IndexOutcome(index=index, index_file=target)


def run_diff(
    config: Config,
    *,
    repo_path: Path,
    data_root: str | Path | None = None,
    index_file: str | Path | None = None,
    summary_dir: str | Path | None = None,
    project_id: str | None = None,
    include_global: bool = False,
    report_file: str | Path | None = None,
    write_report: bool = True,
    plan_file: str | Path | None = None,
    write_plan: bool = True,
) -> DiffOutcome:
    root = _data_root(config, data_root)
    index_path = resolve_artifact_path(root, index_file, SOURCE_INDEX_FILE)
    source_index = read_json_document(index_path, SourceIndex, "Source index")

    repo = repo_path.expanduser().resolve()
    scope = build_project_scope(source_index, repo, project_id, include_global)
    summaries_dir = resolve_summary_dir(repo, summary_dir or config.summary_dir)

    scoped_index = source_index.model_copy(
        update={"sessions": filter_source_sessions(source_index.sessions, scope.project_ids)}
    )
    entries = load_summary_entries(
        summaries_dir,
        prefix=config.summary_prefix,
        extension=config.summary_extension,
    )
    summary_index = index_summary_entries(filter_summary_entries(entries, scope.project_ids))
    report = build_diff_report(scoped_index, summary_index, summaries_dir, scope)

    report_path = resolve_artifact_path(root, report_file, DIFF_REPORT_FILE) if write_report else None
    if report_path is not None:
        write_json_file(report_path, report)

    plan: SyncPlan | None = None
    plan_path = resolve_artifact_path(root, plan_file, SYNC_PLAN_FILE) if write_plan else None
    if plan_path is not None:
        plan = build_sync_plan(report, report_path)
        write_json_file(plan_path, plan)
    return DiffOutcome(report=report, plan=plan, report_file=report_path, plan_file=plan_path)


def _load_report_for_plan(plan: SyncPlan) -> DiffReport | None:
    if not plan.report_file:
        return None
    return read_optional_document(Path(plan.report_file), DiffReport, "Diff report")


def run_sync(
    config: Config,
    *,
    data_root: str | Path | None = None,
    plan_file: str | Path | None = None,
    ledger_file: str | Path | None = None,
    log_file: str | Path | None = None,
    command_template: str | None = None,
    cwd: str | Path | None = None,
    dry_run: bool = False,
    fail_fast: bool = False,
    limit: int | None = None,
    processed_version: int | None = None,
    write_ledger: bool = True,
) -> SyncOutcome:
    root = _data_root(config, data_root)
    plan_path = resolve_artifact_path(root, plan_file, SYNC_PLAN_FILE)
    ledger_path = resolve_artifact_path(root, ledger_file, LEDGER_FILE)
    log_path = resolve_artifact_path(root, log_file, SYNC_LOG_FILE)
    version = processed_version or config.processed_version
    run_cwd = Path(cwd).expanduser().resolve() if cwd else Path.cwd().resolve()

    plan = read_json_document(plan_path, SyncPlan, "Sync plan")
    run = run_sync_plan(
        plan,
        plan_path=plan_path,
        command_template=command_template,
        cwd=run_cwd,
        dry_run=dry_run,
        fail_fast=fail_fast,
        limit=limit,
    )

    now = now_iso()
    ledger: Ledger | None = None
    if write_ledger and not run.dry_run:
        prior = read_optional_document(ledger_path, Ledger, "Ledger")
        base = prior or new_ledger(plan, version, now)
        ledger = merge_ledger(
            base,
            results=run.results,
            now=now,
            report=_load_report_for_plan(plan),
            plan=plan,
            processed_version=version,
        )
        write_json_file(ledger_path, ledger)

    append_json_line(
        log_path,
        build_sync_log_record(
            run,
            generated_at=now,
            ledger_path=ledger_path,
            ledger_written=ledger is not None,
            fail_fast=fail_fast,
            limit=limit,
            cwd=run_cwd,
            processed_version=version,
        ),
    )
    logger.debug("sync log appended", path=str(log_path))
    return SyncOutcome(run=run, ledger=ledger, ledger_file=ledger_path, log_file=log_path, cwd=run_cwd)


__all__ = [
    "IndexOutcome",
    "DiffOutcome",
    "SyncOutcome",
    "run_index",
    "run_diff",
    "run_sync",
]
