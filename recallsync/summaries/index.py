"""Scan a summary directory into a summary index.

Summary documents are markdown files whose front-matter carries at least
``session_id`` and ``project_id``. Files that match the filename pattern but
have no usable front-matter are not summaries and are skipped silently.
Front-matter uses the line grammar of :mod:`recallsync.summaries.front_matter`.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import frontmatter

from recallsync.core.hashing import hash_bytes
from recallsync.core.log import get_logger
from recallsync.core.timestamps import parse_timestamp_ms
from recallsync.models import SummaryDuplicate, SummaryEntry, SummaryIndex, make_key
from recallsync.paths import SUMMARY_EXTENSION, SUMMARY_PREFIX
from recallsync.summaries.front_matter import LineHandler

logger = get_logger(__name__)

_HANDLER = LineHandler()


def list_summary_files(
    summary_dir: Path,
    *,
    prefix: str = SUMMARY_PREFIX,
    extension: str = SUMMARY_EXTENSION,
) -> list[Path]:
    """Return matching files in lexical filename order."""
    if not summary_dir.is_dir():
        return []
    names = sorted(
        path.name
        for path in summary_dir.iterdir()
        if path.is_file() and path.name.startswith(prefix) and path.name.endswith(extension)
    )
    return [summary_dir / name for name in names]


def _string_field(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _number_field(value: Any) -> int | float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _load_front_matter(path: Path) -> tuple[dict[str, Any], bytes] | None:
    raw = path.read_bytes()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("summary skipped", path=str(path), reason="not-utf8")
        return None
    if not _HANDLER.detect(content.lstrip()):
        logger.debug("summary skipped", path=str(path), reason="no-front-matter")
        return None
    metadata, _body = frontmatter.parse(content, handler=_HANDLER)
    return metadata, raw


def parse_summary_file(path: Path) -> SummaryEntry | None:
    """Parse one summary document, or return None if it is not a summary."""
    loaded = _load_front_matter(path)
    if loaded is None:
        return None
    metadata, raw = loaded

    session_id = _string_field(metadata.get("session_id"))
    project_id = _string_field(metadata.get("project_id"))
    if not session_id or not project_id:
        logger.debug("summary skipped", path=str(path), reason="missing-ids")
        return None

    generated_at = _string_field(metadata.get("summary_generated_at"))
    stat = path.stat()
    return SummaryEntry(
        key=make_key(project_id, session_id),
        session_id=session_id,
        project_id=project_id,
        summary_path=str(path),
        summary_generated_at=generated_at,
        summary_generated_at_ms=parse_timestamp_ms(generated_at),
        summary_model=_string_field(metadata.get("summary_model")),
        summary_chunks=_number_field(metadata.get("summary_chunks")),
        summary_mtime_ms=stat.st_mtime_ns // 1_000_000,
        summary_fingerprint=hash_bytes(raw),
    )


def load_summary_entries(
    summary_dir: Path,
    *,
    prefix: str = SUMMARY_PREFIX,
    extension: str = SUMMARY_EXTENSION,
) -> list[SummaryEntry]:
    entries: list[SummaryEntry] = []
    for path in list_summary_files(summary_dir, prefix=prefix, extension=extension):
        entry = parse_summary_file(path)
        if entry is not None:
            entries.append(entry)
    return entries


def summary_recency_ms(entry: SummaryEntry) -> int | None:
    """Generated-at if present, else file mtime, else None."""
    if entry.summary_generated_at_ms is not None:
        return entry.summary_generated_at_ms
    return entry.summary_mtime_ms


def _is_newer(candidate: SummaryEntry, current: SummaryEntry) -> bool:
    candidate_ms = summary_recency_ms(candidate)
    current_ms = summary_recency_ms(current)
    if candidate_ms is None:
        return False
    if current_ms is None:
        return True
    return candidate_ms > current_ms


def index_summary_entries(entries: Iterable[SummaryEntry]) -> SummaryIndex:
    """Keep the most recent entry per key and log every displaced one.

    Ties keep the first entry seen, so callers pass entries in a stable order.
    """
    summaries: dict[str, SummaryEntry] = {}
    duplicates: list[SummaryDuplicate] = []
    for entry in entries:
        existing = summaries.get(entry.key)
        if existing is None:
            summaries[entry.key] = entry
            continue
        if _is_newer(entry, existing):
            summaries[entry.key] = entry
            duplicates.append(SummaryDuplicate(key=entry.key, kept=entry.summary_path, dropped=existing.summary_path))
        else:
            duplicates.append(SummaryDuplicate(key=entry.key, kept=existing.summary_path, dropped=entry.summary_path))
    if duplicates:
        logger.info("duplicate summaries resolved", duplicates=len(duplicates))
    return SummaryIndex(summaries=summaries, duplicates=duplicates)


__all__ = [
    "list_summary_files",
    "parse_summary_file",
    "load_summary_entries",
    "summary_recency_ms",
    "index_summary_entries",
]
