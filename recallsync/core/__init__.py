"""Core utilities package for recallsync."""

from recallsync.core.hashing import hash_bytes, hash_fields, hash_text
from recallsync.core.timestamps import ms_to_iso, now_iso, parse_timestamp, parse_timestamp_ms

__all__ = [
    "hash_text",
    "hash_fields",
    "hash_bytes",
    "parse_timestamp",
    "parse_timestamp_ms",
    "ms_to_iso",
    "now_iso",
]
