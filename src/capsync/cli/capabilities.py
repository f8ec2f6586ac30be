"""Capability inspection commands: list, show."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.table import Table

from ._common import CAPSYNC_HOME, console
from ..config import load_config, resolve_capability_dir
from ..errors import StoreUnavailable
from ..models import CapabilityType
from ..store import CapabilityStore


def _open_store(home: str) -> CapabilityStore:
    home_path = Path(home).expanduser()
    return CapabilityStore(resolve_capability_dir(home_path, load_config(home_path)))


def register_capability_commands(main: click.Group) -> None:
    """Register list/show on the main CLI group."""

    @main.command("list")
    @click.option("--home", default=CAPSYNC_HOME, type=click.Path(), help="capsync home directory.")
    @click.option(
        "--type", "cap_type", default=None,
        type=click.Choice([t.value for t in CapabilityType]),
        help="Only list this category.",
    )
    def list_capabilities(home: str, cap_type: Optional[str]):
        """List cached capabilities."""
        store = _open_store(home)
        try:
            caps = store.load_all()
        except StoreUnavailable as exc:
            console.print(f"[bold red]Cannot read cache:[/] {escape(str(exc))}")
            sys.exit(1)

        if cap_type:
            caps = [c for c in caps if c.type.value == cap_type]

        if not caps:
            console.print("[yellow]No capabilities cached.[/] Run capsync update first.")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("NAME", style="cyan")
        table.add_column("CATEGORY")
        table.add_column("DESCRIPTION", style="dim")
        for cap in caps:
            table.add_row(escape(cap.name), cap.type.value, escape(cap.description))
        console.print(table)

    @main.command("show")
    @click.argument("name")
    @click.option("--home", default=CAPSYNC_HOME, type=click.Path(), help="capsync home directory.")
    def show_capability(name: str, home: str):
        """Show one cached capability and its parameters."""
        store = _open_store(home)
        try:
            cap = store.get(name)
        except StoreUnavailable as exc:
            console.print(f"[bold red]Cannot read cache:[/] {escape(str(exc))}")
            sys.exit(1)

        if cap is None:
            console.print(f"[bold red]Capability not found:[/] {escape(name)}")
            sys.exit(1)

        console.print(f"\n  [bold cyan]{escape(cap.name)}[/] ({cap.type.value})")
        if cap.description:
            console.print(f"  {escape(cap.description)}")
        if cap.crd_name:
            console.print(f"  [dim]CRD: {escape(cap.crd_name)}[/]")
        if cap.applies_to:
            console.print(f"  [dim]Applies to: {escape(', '.join(cap.applies_to))}[/]")

        if cap.parameters:
            table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
            table.add_column("PARAMETER", style="cyan")
            table.add_column("TYPE")
            table.add_column("REQUIRED")
            table.add_column("DEFAULT")
            table.add_column("USAGE", style="dim")
            for param in cap.parameters:
                table.add_row(
                    escape(param.name),
                    escape(param.type),
                    "yes" if param.required else "no",
                    "" if param.default is None else escape(str(param.default)),
                    escape(param.usage),
                )
            console.print(table)
        console.print()
