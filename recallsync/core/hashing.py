"""SHA-256 hashing helpers shared by the source and summary indexers."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

FIELD_SEPARATOR = "|"


def hash_text(text: str) -> str:
    """Hash UTF-8 text to full SHA-256 hex digest (64 chars)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_fields(fields: Iterable[str | int | float | None]) -> str:
    """Hash an ordered field tuple; ``None`` renders as the empty string."""
    payload = FIELD_SEPARATOR.join("" if value is None else str(value) for value in fields)
    return hash_text(payload)


__all__ = ["FIELD_SEPARATOR", "hash_text", "hash_bytes", "hash_fields"]
