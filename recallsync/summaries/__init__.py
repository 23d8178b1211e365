"""Summary document indexing."""

from recallsync.summaries.index import (
    index_summary_entries,
    list_summary_files,
    load_summary_entries,
    parse_summary_file,
    summary_recency_ms,
)

__all__ = [
    "list_summary_files",
    "parse_summary_file",
    "load_summary_entries",
    "summary_recency_ms",
    "index_summary_entries",
]
