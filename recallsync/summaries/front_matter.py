"""Line-based front-matter handler for summary documents.

Summary writers emit one ``key: value`` pair per line with unquoted values,
so titles such as ``Refactor: split parser`` are common. That is not valid
YAML; this handler plugs the simpler grammar into python-frontmatter:

- the key is everything before the first ``:``; lines without one are ignored
- ``null``, ``true`` and ``false`` map to ``None``, ``True`` and ``False``
- ``[a, b]`` is a list of unquoted items; ``[]`` is empty
- decimal numbers become ``int`` or ``float``
- anything else is a string, with one pair of surrounding quotes removed
"""

from __future__ import annotations

import re
from typing import Any

from frontmatter.default_handlers import BaseHandler

_LITERALS: dict[str, Any] = {"null": None, "true": True, "false": False}
_INTEGER = re.compile(r"[+-]?\d+")
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_value(raw: str) -> Any:
    if raw in _LITERALS:
        return _LITERALS[raw]
    if raw.startswith("[") and raw.endswith("]"):
        inner = raw[1:-1].strip()
        return [_unquote(item.strip()) for item in inner.split(",") if item.strip()]
    if _INTEGER.fullmatch(raw):
        return int(raw)
    if _NUMBER.fullmatch(raw):
        return float(raw)
    return _unquote(raw)


def format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    return str(value)


class LineHandler(BaseHandler):
    """``---`` delimited block of ``key: value`` lines."""

    FM_BOUNDARY = re.compile(r"^-{3}\s*$", re.MULTILINE)
    START_DELIMITER = END_DELIMITER = "---"

    def load(self, fm: str, **kwargs: object) -> dict[str, Any]:
        metadata: dict[str, Any] = {}
        for line in fm.splitlines():
            key, sep, raw = line.partition(":")
            key = key.strip()
            if not sep or not key:
                continue
            metadata[key] = parse_value(raw.strip())
        return metadata

    def export(self, metadata: dict[str, Any], **kwargs: object) -> str:
        return "\n".join(f"{key}: {format_value(value)}" for key, value in metadata.items())


__all__ = ["LineHandler", "parse_value", "format_value"]
