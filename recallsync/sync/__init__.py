"""Sync plan execution and the audit ledger."""

from recallsync.sync.ledger import merge_ledger, new_ledger
from recallsync.sync.runner import SyncRunResult, adjust_template_for_scope, apply_template, run_sync_plan

__all__ = [
    "SyncRunResult",
    "adjust_template_for_scope",
    "apply_template",
    "run_sync_plan",
    "merge_ledger",
    "new_ledger",
]
