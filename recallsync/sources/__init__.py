"""Source indexing over the external session store."""

from recallsync.sources.index import build_session_entry, build_session_fingerprint, build_source_index
from recallsync.sources.store import SessionStats, SourceStore, open_source_store

__all__ = [
    "SessionStats",
    "SourceStore",
    "open_source_store",
    "build_session_entry",
    "build_session_fingerprint",
    "build_source_index",
]
