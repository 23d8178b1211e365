"""CLI output formatting utilities."""

from __future__ import annotations

from recallsync.models import DiffEntry, DiffReport, SourceIndex, SyncItemResult


def format_index_lines(index: SourceIndex) -> list[str]:
    return [
        f"Source index written: {index.index_file}",
        f"Sessions indexed: {index.stats.session_count} (projects: {index.stats.project_count})",
    ]


def _section(label: str, entries: list[DiffEntry], limit: int) -> list[str]:
    suffix = f", showing {limit}" if limit > 0 and len(entries) > limit else ""
    lines = [f"{label} ({len(entries)}{suffix})"]
    showing = entries[:limit]
    if not showing:
        return [*lines, "- none", ""]
    for entry in showing:
        title = entry.title or "untitled"
        source_updated = entry.source_updated_at or "n/a"
        summary_generated = entry.summary_generated_at or "n/a"
        lines.append(
            f"- {entry.key} | {title} | source_updated_at={source_updated} | summary_generated_at={summary_generated}"
        )
    lines.append("")
    return lines


def render_diff_report(report: DiffReport, limit: int) -> list[str]:
    """Human-readable diff report; each section shows at most ``limit`` rows."""
    stats = report.stats
    lines = [
        f"Source index: {report.index_file}",
        f"Summary dir: {report.summary_dir}",
        f"Project scope: {', '.join(report.project_scope.project_ids)}",
        f"Source sessions: {stats.source_sessions}",
        f"Local summaries: {stats.local_summaries} (duplicates: {stats.local_duplicates})",
        "Diff:",
        f"- new: {stats.new}",
        f"- stale: {stats.stale}",
        f"- unchanged: {stats.unchanged}",
        f"- orphan: {stats.orphan}",
        f"- unknown: {stats.unknown}",
        "",
    ]
    lines += _section("New", report.new, limit)
    lines += _section("Stale", report.stale, limit)
    lines += _section("Orphan", report.orphan, limit)
    lines += _section("Unknown", report.unknown, limit)

    if report.duplicates:
        suffix = f", showing {limit}" if limit > 0 and len(report.duplicates) > limit else ""
        lines.append(f"Duplicates ({len(report.duplicates)}{suffix})")
        for duplicate in report.duplicates[:limit]:
            lines.append(f"- {duplicate.key} | kept={duplicate.kept} | dropped={duplicate.dropped}")
        lines.append("")

    while lines and not lines[-1]:
        lines.pop()
    return lines


def format_result_line(result: SyncItemResult) -> str:
    line = f"{result.status.upper()}: {result.item.key}"
    if result.command:
        line += f" command={result.command}"
    if result.error and result.status == "failed":
        line += f" error={result.error}"
    return line
