"""recallsync - keep derived session summaries in sync with their source.

Pipeline stages, each consuming the previous stage's output:

- source index   (``recallsync.sources``)   snapshot + fingerprint every session
- summary index  (``recallsync.summaries``) parse local summary front-matter
- diff report    (``recallsync.diff``)      new / stale / unchanged / orphan / unknown
- sync plan      (``recallsync.diff.plan``) the addressable new + stale subset
- sync run       (``recallsync.sync``)      run a command per plan item
- ledger         (``recallsync.sync.ledger``) cross-run audit state

Example:
    from pathlib import Path
    from recallsync.config import load_config
    from recallsync.pipeline import run_diff, run_index

    config = load_config()
    run_index(config)
    outcome = run_diff(config, repo_path=Path("."))
    print(outcome.report.stats)
"""

from recallsync.errors import RecallError
from recallsync.models import DiffReport, Ledger, SourceIndex, SummaryIndex, SyncPlan

__version__ = "0.3.0"

__all__ = [
    "RecallError",
    "SourceIndex",
    "SummaryIndex",
    "DiffReport",
    "SyncPlan",
    "Ledger",
    "__version__",
]
