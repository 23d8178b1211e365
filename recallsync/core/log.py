"""structlog setup for the recallsync CLI.

Log events go to stderr so that ``--json`` output on stdout stays parseable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


def _stderr_logger(*_args: Any) -> structlog.PrintLogger:
    # resolve sys.stderr per logger; test runners swap it between invocations
    return structlog.PrintLogger(file=sys.stderr)


def _renderer(json_logs: bool) -> Processor:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Route pipeline events to stderr; ``verbose`` lowers the threshold to DEBUG."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info if json_logs else structlog.dev.set_exc_info,
        _renderer(json_logs),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def bind_command(command: str | None) -> None:
    """Tag every event emitted for the rest of this invocation with ``command``."""
    structlog.contextvars.clear_contextvars()
    if command:
        structlog.contextvars.bind_contextvars(command=command)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


__all__ = ["configure_logging", "bind_command", "get_logger"]
