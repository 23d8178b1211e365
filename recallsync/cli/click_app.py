"""CLI entrypoint."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from recallsync.cli.commands.diff import diff_command
from recallsync.cli.commands.index import index_command
from recallsync.cli.commands.sync import sync_command
from recallsync.cli.helpers import should_use_plain
from recallsync.cli.types import AppEnv
from recallsync.core.log import bind_command, configure_logging
from recallsync.ui import create_ui


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--plain", is_flag=True, help="Force non-interactive plain output")
@click.option("--interactive", is_flag=True, help="Force rich terminal output")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Path to config.json")
@click.option("--json-logs", is_flag=True, help="Emit structured logs as JSON on stderr")
@click.pass_context
def cli(ctx: click.Context, plain: bool, interactive: bool, config_path: Optional[Path], json_logs: bool) -> None:
    """Keep session summaries in sync with the OpenCode session store."""
    configure_logging(verbose=False, json_logs=json_logs)
    bind_command(ctx.invoked_subcommand)
    use_plain = should_use_plain(plain=plain, interactive=interactive)
    ctx.obj = AppEnv(ui=create_ui(use_plain), config_path=config_path, json_logs=json_logs)


cli.add_command(index_command)
cli.add_command(diff_command)
cli.add_command(sync_command)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
