from __future__ import annotations

import json

import pytest

from recallsync.artifacts import append_json_line, read_json_document, read_optional_document, write_json_file
from recallsync.errors import ArtifactError, ArtifactNotFoundError
from recallsync.models import Ledger, SyncPlan
from tests.factories import make_plan, make_plan_item


def test_written_documents_are_pretty_and_reloadable(tmp_path):
    plan = make_plan([make_plan_item("ses_1")])
    target = tmp_path / "nested" / "sync-plan.json"

    write_json_file(target, plan)

    text = target.read_text()
    assert text.endswith("\n")
    assert text.startswith("{\n  ")
    assert read_json_document(target, SyncPlan, "Sync plan") == plan
    assert [p.name for p in target.parent.iterdir()] == ["sync-plan.json"]


def test_missing_document(tmp_path):
    with pytest.raises(ArtifactNotFoundError, match="Sync plan not found"):
        read_json_document(tmp_path / "absent.json", SyncPlan, "Sync plan")
    assert read_optional_document(tmp_path / "absent.json", Ledger, "Ledger") is None
    assert read_optional_document(None, Ledger, "Ledger") is None


def test_corrupt_document(tmp_path):
    target = tmp_path / "state.json"
    target.write_text("{oops")
    with pytest.raises(ArtifactError, match="not valid JSON"):
        read_json_document(target, Ledger, "Ledger")

    target.write_text(json.dumps({"entries": []}))
    with pytest.raises(ArtifactError, match="unexpected shape"):
        read_json_document(target, Ledger, "Ledger")


def test_append_json_line(tmp_path):
    target = tmp_path / "log.jsonl"

    append_json_line(target, {"n": 1})
    append_json_line(target, {"n": 2})

    assert [json.loads(line) for line in target.read_text().splitlines()] == [{"n": 1}, {"n": 2}]
