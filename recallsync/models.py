"""Document models for the recall reconciliation pipeline.

Every persisted artifact (source index, diff report, sync plan, ledger) is a
pydantic model. Optional fields default to ``None`` so that older documents
missing a field still decode.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SOURCE_INDEX_VERSION = 2
DIFF_REPORT_VERSION = 1
SYNC_PLAN_VERSION = 1
LEDGER_VERSION = 1

GLOBAL_PROJECT_ID = "global"

DiffStatus = Literal["new", "stale", "unchanged", "orphan", "unknown"]
PlanItemStatus = Literal["new", "stale"]
ResultStatus = Literal["success", "failed", "skipped"]
LedgerStatus = Literal["processed", "pending", "orphan", "unknown"]

DIFF_STATUSES: tuple[DiffStatus, ...] = ("new", "stale", "unchanged", "orphan", "unknown")
LEDGER_STATUSES: tuple[LedgerStatus, ...] = ("processed", "pending", "orphan", "unknown")


def make_key(project_id: str, session_id: str) -> str:
    return f"{project_id}:{session_id}"


# --- source index ---------------------------------------------------------


class SourceProject(BaseModel):
    id: str
    worktree: str | None = None


class SourceEntry(BaseModel):
    key: str
    session_id: str
    project_id: str
    title: str | None = None
    slug: str | None = None
    directory: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    message_count: int = 0
    part_count: int = 0
    message_latest_mtime_ms: int | None = None
    part_latest_mtime_ms: int | None = None
    session_file: str = ""
    message_dir: str | None = None
    session_mtime_ms: int | None = None
    fingerprint: str


class SourceFilters(BaseModel):
    project_id: str | None = None
    session_id: str | None = None


class SourceStats(BaseModel):
    project_count: int = 0
    session_count: int = 0


class SourceIndex(BaseModel):
    version: int = SOURCE_INDEX_VERSION
    generated_at: str
    storage_root: str = ""
    db_path: str = ""
    data_root: str = ""
    index_file: str = ""
    filters: SourceFilters = Field(default_factory=SourceFilters)
    projects: dict[str, SourceProject] = Field(default_factory=dict)
    sessions: dict[str, SourceEntry] = Field(default_factory=dict)
    stats: SourceStats = Field(default_factory=SourceStats)


# --- summary index --------------------------------------------------------


class SummaryEntry(BaseModel):
    key: str
    session_id: str
    project_id: str
    summary_path: str
    summary_generated_at: str | None = None
    summary_generated_at_ms: int | None = None
    summary_model: str | None = None
    summary_chunks: float | int | None = None
    summary_mtime_ms: int | None = None
    summary_fingerprint: str


class SummaryDuplicate(BaseModel):
    key: str
    kept: str
    dropped: str


class SummaryIndex(BaseModel):
    summaries: dict[str, SummaryEntry] = Field(default_factory=dict)
    duplicates: list[SummaryDuplicate] = Field(default_factory=list)


# --- diff report ----------------------------------------------------------


class ProjectScope(BaseModel):
    project_ids: list[str] = Field(default_factory=list)
    include_global: bool = False
    repo_path: str = ""


class DiffEntry(BaseModel):
    key: str
    session_id: str | None = None
    project_id: str | None = None
    title: str | None = None
    status: DiffStatus
    reason: str | None = None
    source_fingerprint: str | None = None
    source_updated_at: str | None = None
    source_latest_ms: int | None = None
    summary_fingerprint: str | None = None
    summary_generated_at: str | None = None
    summary_mtime_ms: int | None = None
    summary_path: str | None = None


class DiffStats(BaseModel):
    source_sessions: int = 0
    local_summaries: int = 0
    local_duplicates: int = 0
    new: int = 0
    stale: int = 0
    unchanged: int = 0
    orphan: int = 0
    unknown: int = 0


class DiffReport(BaseModel):
    version: int = DIFF_REPORT_VERSION
    generated_at: str
    index_file: str = ""
    summary_dir: str = ""
    project_scope: ProjectScope = Field(default_factory=ProjectScope)
    stats: DiffStats = Field(default_factory=DiffStats)
    new: list[DiffEntry] = Field(default_factory=list)
    stale: list[DiffEntry] = Field(default_factory=list)
    unchanged: list[DiffEntry] = Field(default_factory=list)
    orphan: list[DiffEntry] = Field(default_factory=list)
    unknown: list[DiffEntry] = Field(default_factory=list)
    duplicates: list[SummaryDuplicate] = Field(default_factory=list)

    def bucket(self, status: DiffStatus) -> list[DiffEntry]:
        return getattr(self, status)

    def iter_entries(self):
        for status in DIFF_STATUSES:
            yield from self.bucket(status)


# --- sync plan ------------------------------------------------------------


class SyncPlanItem(BaseModel):
    key: str
    session_id: str
    project_id: str
    title: str | None = None
    status: PlanItemStatus
    reason: str | None = None
    source_fingerprint: str | None = None
    source_updated_at: str | None = None
    summary_fingerprint: str | None = None
    summary_generated_at: str | None = None
    summary_path: str | None = None


class SyncPlanStats(BaseModel):
    total: int = 0
    new: int = 0
    stale: int = 0


class SyncPlan(BaseModel):
    version: int = SYNC_PLAN_VERSION
    generated_at: str
    index_file: str = ""
    summary_dir: str = ""
    report_file: str | None = None
    project_scope: ProjectScope = Field(default_factory=ProjectScope)
    stats: SyncPlanStats = Field(default_factory=SyncPlanStats)
    items: list[SyncPlanItem] = Field(default_factory=list)


# --- sync execution -------------------------------------------------------


class SyncItemResult(BaseModel):
    item: SyncPlanItem
    status: ResultStatus
    command: str | None = None
    error: str | None = None


class SyncRunSummary(BaseModel):
    success: int = 0
    failed: int = 0
    skipped: int = 0


# --- ledger ---------------------------------------------------------------


class LedgerEntry(BaseModel):
    key: str
    session_id: str | None = None
    project_id: str | None = None
    status: LedgerStatus
    reason: str | None = None
    source_fingerprint: str | None = None
    source_updated_at: str | None = None
    summary_fingerprint: str | None = None
    summary_path: str | None = None
    summary_generated_at: str | None = None
    processed_at: str | None = None
    verified_at: str


class LedgerStats(BaseModel):
    processed: int = 0
    pending: int = 0
    orphan: int = 0
    unknown: int = 0


class Ledger(BaseModel):
    version: int = LEDGER_VERSION
    processed_version: int = 1
    generated_at: str
    index_file: str = ""
    summary_dir: str = ""
    entries: dict[str, LedgerEntry] = Field(default_factory=dict)
    stats: LedgerStats = Field(default_factory=LedgerStats)


__all__ = [
    "SOURCE_INDEX_VERSION",
    "DIFF_REPORT_VERSION",
    "SYNC_PLAN_VERSION",
    "LEDGER_VERSION",
    "GLOBAL_PROJECT_ID",
    "DiffStatus",
    "PlanItemStatus",
    "ResultStatus",
    "LedgerStatus",
    "DIFF_STATUSES",
    "LEDGER_STATUSES",
    "make_key",
    "SourceProject",
    "SourceEntry",
    "SourceFilters",
    "SourceStats",
    "SourceIndex",
    "SummaryEntry",
    "SummaryDuplicate",
    "SummaryIndex",
    "ProjectScope",
    "DiffEntry",
    "DiffStats",
    "DiffReport",
    "SyncPlanItem",
    "SyncPlanStats",
    "SyncPlan",
    "SyncItemResult",
    "SyncRunSummary",
    "LedgerEntry",
    "LedgerStats",
    "Ledger",
]
