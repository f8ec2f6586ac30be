"""Update command: refresh the local capability cache from its source."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape

from ._common import CAPSYNC_HOME, console
from ..config import get_capability_dir, load_config
from ..errors import FetchFailure, LoadFailure, PartialFetchFailure, PersistFailure
from ..refresh import SyncResult, refresh_capabilities
from ..report import format_json, headline, render_table, summary_line
from ..sources import DirectorySource
from ..store import CapabilityStore


def _print_result(result: SyncResult, json_out: bool) -> None:
    if json_out:
        click.echo(format_json(result))
        return

    report = result.report
    console.print(f"  {headline(report)}")
    console.print(f"  [dim]{summary_line(report)}[/]")
    console.print(render_table(report))

    if result.partial_failures:
        console.print(
            f"\n  [yellow]{len(result.partial_failures)} definition(s) skipped:[/]"
        )
        for issue in result.partial_failures:
            console.print(f"    [yellow]![/] {escape(str(issue))}")


def register_update_commands(main: click.Group) -> None:
    """Register the update command."""

    @main.command("update")
    @click.option("--home", default=CAPSYNC_HOME, type=click.Path(), help="capsync home directory.")
    @click.option(
        "--source", "source_dir", default=None, type=click.Path(),
        help="Directory of WorkloadDefinition/TraitDefinition manifests.",
    )
    @click.option("--strict", is_flag=True, help="Abort if any definition is skipped.")
    @click.option("--json-out", is_flag=True, help="Print the result as JSON.")
    def update(home: str, source_dir: Optional[str], strict: bool, json_out: bool):
        """Sync capability definitions from the source into the local cache."""
        home_path = Path(home).expanduser()
        config = load_config(home_path)

        source_path = Path(source_dir) if source_dir else config.source_dir
        if source_path is None:
            console.print(
                "[bold red]No definition source configured.[/] "
                "Pass --source or set source_dir in config.yaml."
            )
            sys.exit(1)

        source = DirectorySource(source_path)
        store = CapabilityStore(get_capability_dir(home_path, config))

        if not json_out:
            console.print(
                f"\n  Synchronizing capabilities from [cyan]{escape(str(source.path))}[/]..."
            )

        try:
            result = refresh_capabilities(source, store, strict=strict or config.strict)
        except PartialFetchFailure as exc:
            console.print(f"[bold red]Sync aborted:[/] {escape(str(exc))}")
            for issue in exc.issues:
                console.print(f"    [red]x[/] {escape(str(issue))}")
            sys.exit(1)
        except (LoadFailure, FetchFailure) as exc:
            console.print(f"[bold red]Sync failed:[/] {escape(str(exc))}")
            sys.exit(1)
        except PersistFailure as exc:
            _print_result(
                SyncResult(
                    report=exc.report,
                    partial_failures=exc.partial_failures,
                    cache_dir=store.cache_dir,
                ),
                json_out,
            )
            console.print(
                f"[bold red]Cache update failed:[/] {escape(str(exc))}\n"
                "  [dim]The cache may not match the report; run update again.[/]"
            )
            sys.exit(1)

        _print_result(result, json_out)
