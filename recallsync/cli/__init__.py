"""CLI package public API."""

from recallsync.cli.click_app import cli, main

__all__ = ["cli", "main"]
