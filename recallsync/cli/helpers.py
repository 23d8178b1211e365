"""CLI helper functions."""

from __future__ import annotations

import os
import sys
from typing import Any, NoReturn

import click

from recallsync.cli.types import AppEnv
from recallsync.config import Config, load_config
from recallsync.core import json as json_util
from recallsync.core.log import configure_logging


def fail(command: str, message: str) -> NoReturn:
    raise SystemExit(f"{command}: {message}")


def should_use_plain(*, plain: bool, interactive: bool) -> bool:
    if plain:
        return True
    if interactive:
        return False
    env_force = os.environ.get("RECALLSYNC_FORCE_PLAIN")
    if env_force and env_force.lower() not in {"0", "false", "no"}:
        return True
    return not (sys.stdout.isatty() and sys.stderr.isatty())


def load_effective_config(env: AppEnv) -> Config:
    return load_config(env.config_path)


def apply_verbosity(env: AppEnv, verbose: bool) -> None:
    if verbose:
        configure_logging(verbose=True, json_logs=env.json_logs)


def echo_json(payload: Any) -> None:
    click.echo(json_util.dumps(payload, pretty=True), nl=False)
