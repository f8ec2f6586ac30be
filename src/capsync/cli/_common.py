"""Shared utilities for the CLI command modules."""

from __future__ import annotations

import logging

from rich.console import Console

from .. import CAPSYNC_HOME

console = Console()
logger = logging.getLogger("capsync.cli")

__all__ = ["CAPSYNC_HOME", "console", "logger", "configure_logging"]


def configure_logging(verbose: bool = False) -> None:
    """Send capsync logs to stderr, at INFO when verbose."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    logging.getLogger("capsync").setLevel(logging.INFO if verbose else logging.WARNING)
