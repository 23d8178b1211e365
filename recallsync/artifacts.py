"""Read and write the pipeline's JSON artifacts.

Documents are whole-file: each run reads the full document, computes a new
one and replaces the file. There is no locking; concurrent runs against the
same paths must be serialized by the caller.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from recallsync.core import json as json_util
from recallsync.errors import ArtifactError, ArtifactNotFoundError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _to_payload(document: BaseModel | Any) -> Any:
    if isinstance(document, BaseModel):
        return document.model_dump(mode="json")
    return document


def write_json_file(path: Path, document: BaseModel | Any) -> Path:
    """Write ``document`` as pretty-printed, newline-terminated JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json_util.dumps(_to_payload(document), pretty=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def append_json_line(path: Path, record: BaseModel | Any) -> Path:
    """Append one compact JSON object as a line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json_util.dumps(_to_payload(record)))
        handle.write("\n")
    return path


def read_json_document(path: Path, model: type[ModelT], label: str) -> ModelT:
    """Load and validate a persisted document.

    Raises:
        ArtifactNotFoundError: the file does not exist.
        ArtifactError: the file is not valid JSON or does not match ``model``.
    """
    if not path.exists():
        raise ArtifactNotFoundError(f"{label} not found: {path}")
    try:
        payload = json_util.loads(path.read_bytes())
    except json_util.JSONDecodeError as exc:
        raise ArtifactError(f"{label} is not valid JSON: {path} ({exc})") from exc
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ArtifactError(f"{label} has an unexpected shape: {path} ({exc.error_count()} errors)") from exc


def read_optional_document(path: Path | None, model: type[ModelT], label: str) -> ModelT | None:
    if path is None or not path.exists():
        return None
    return read_json_document(path, model, label)


__all__ = [
    "write_json_file",
    "append_json_line",
    "read_json_document",
    "read_optional_document",
]
