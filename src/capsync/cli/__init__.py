"""
capsync CLI.

The main Click group is defined here; each command module registers
its commands on it.

Entry point: capsync.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="capsync")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
def main(verbose: bool):
    """capsync -- sync workload and trait definitions into a local cache."""
    configure_logging(verbose)


# ---------------------------------------------------------------------------
# Register command modules
# ---------------------------------------------------------------------------

from .update import register_update_commands
from .capabilities import register_capability_commands

register_update_commands(main)
register_capability_commands(main)
