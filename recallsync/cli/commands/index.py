"""Index command - snapshot the session store into the source index."""

from __future__ import annotations

from pathlib import Path

import click

from recallsync.cli.formatting import format_index_lines
from recallsync.cli.helpers import apply_verbosity, echo_json, fail, load_effective_config
from recallsync.cli.types import AppEnv
from recallsync.errors import RecallError
from recallsync.pipeline import run_index


@click.command("index")
@click.option("--db", "db_path", type=click.Path(path_type=Path), help="OpenCode sqlite database path")
@click.option("--data-root", type=click.Path(path_type=Path), help="Data root (default: $XDG_DATA_HOME/recallsync)")
@click.option(
    "--index",
    "index_file",
    type=click.Path(path_type=Path),
    help="Output index file (default: <data-root>/recall/opencode/source-index.json)",
)
@click.option("--project", "project_id", help="Limit to a single project id")
@click.option("--session", "session_id", help="Limit to a single session id")
@click.option("--json", "as_json", is_flag=True, help="Print the source index as JSON")
@click.option("--verbose", is_flag=True, help="Print every indexed session")
@click.pass_obj
def index_command(
    env: AppEnv,
    db_path: Path | None,
    data_root: Path | None,
    index_file: Path | None,
    project_id: str | None,
    session_id: str | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Build the source index from the session store."""
    apply_verbosity(env, verbose)
    try:
        config = load_effective_config(env)
        outcome = run_index(
            config,
            db_path=db_path,
            data_root=data_root,
            index_file=index_file,
            project_id=project_id,
            session_id=session_id,
        )
    except RecallError as exc:
        fail("index", str(exc))

    if as_json:
        echo_json(outcome.index.model_dump(mode="json"))
        return
    if verbose:
        env.ui.lines(
            f"Indexed {entry.key} ({entry.message_count} messages)" for entry in outcome.index.sessions.values()
        )
    env.ui.summary("Index", format_index_lines(outcome.index))
