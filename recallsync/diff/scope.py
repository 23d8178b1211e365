"""Project scoping for diff runs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from recallsync.errors import ScopeError
from recallsync.models import GLOBAL_PROJECT_ID, ProjectScope, SourceEntry, SourceIndex, SourceProject, SummaryEntry


def resolve_project_id_for_repo(projects: Mapping[str, SourceProject], repo_path: Path) -> str | None:
    """Return the id of the project whose worktree is ``repo_path``."""
    target = repo_path.expanduser().resolve()
    for project in projects.values():
        if project.worktree and Path(project.worktree).expanduser().resolve() == target:
            return project.id
    return None


def build_project_scope(
    source_index: SourceIndex,
    repo_path: Path,
    explicit_project: str | None = None,
    include_global: bool = False,
) -> ProjectScope:
    """Resolve the set of project ids a diff run covers.

    Raises:
        ScopeError: no project matches the repo and the global scope was not requested.
    """
    project_id = explicit_project or resolve_project_id_for_repo(source_index.projects, repo_path)
    project_ids = [project_id] if project_id else []
    if include_global and GLOBAL_PROJECT_ID not in project_ids:
        project_ids.append(GLOBAL_PROJECT_ID)
    if not project_ids:
        raise ScopeError(f"No OpenCode project found for repo: {repo_path}. Use --project or --include-global.")
    return ProjectScope(project_ids=project_ids, include_global=include_global, repo_path=str(repo_path))


def filter_source_sessions(sessions: Mapping[str, SourceEntry], project_ids: Iterable[str]) -> dict[str, SourceEntry]:
    allowed = set(project_ids)
    return {key: entry for key, entry in sessions.items() if entry.project_id in allowed}


def filter_summary_entries(entries: Iterable[SummaryEntry], project_ids: Iterable[str]) -> list[SummaryEntry]:
    allowed = set(project_ids)
    return [entry for entry in entries if entry.project_id in allowed]


__all__ = [
    "resolve_project_id_for_repo",
    "build_project_scope",
    "filter_source_sessions",
    "filter_summary_entries",
]
