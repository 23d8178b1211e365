"""Central JSON utilities using orjson."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import orjson


def _default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


def dumps(obj: Any, *, pretty: bool = False, default: Callable[[Any], Any] | None = None) -> str:
    """Dump object to a JSON string; ``pretty`` indents by two spaces and adds a trailing newline."""
    option = orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE if pretty else None
    return orjson.dumps(obj, default=default or _default, option=option).decode("utf-8")


def loads(obj: str | bytes) -> Any:
    """Load object from JSON string or bytes."""
    return orjson.loads(obj)


JSONDecodeError = orjson.JSONDecodeError

__all__ = ["dumps", "loads", "JSONDecodeError"]
