"""
Refresh report rendering.

Turns a DiffReport into the counts line, the ordered table rows, a Rich
table for the terminal, or JSON for scripts.

When nothing changed the whole cached set is listed, workloads first.
Otherwise only Added, Updated and Deleted rows are shown, in that order.
"""

from __future__ import annotations

import json
from typing import List, NamedTuple, Tuple

from rich.markup import escape
from rich.table import Table

from .models import Capability, CapabilityType
from .reconcile import DiffReport, RefreshStatus
from .refresh import SyncResult


class StatusStyle(NamedTuple):
    """How a row of a given status is drawn."""

    icon: str
    color: str


_STYLES = {
    RefreshStatus.ADDED: StatusStyle("+", "green"),
    RefreshStatus.UPDATED: StatusStyle("*", "yellow"),
    RefreshStatus.DELETED: StatusStyle("-", "red"),
    RefreshStatus.UNCHANGED: StatusStyle("", ""),
}


def status_style(status: RefreshStatus) -> StatusStyle:
    """Map a refresh status to its icon and Rich color."""
    return _STYLES[RefreshStatus(status)]


def summary_line(report: DiffReport) -> str:
    """One-line counts summary, e.g. ``added=2 updated=0 deleted=0``."""
    return (
        f"added={len(report.added)} "
        f"updated={len(report.updated)} "
        f"deleted={len(report.deleted)}"
    )


def report_rows(report: DiffReport) -> List[Tuple[RefreshStatus, Capability]]:
    """Rows to display for a report, in display order."""
    if not report.has_changes:
        rows = []
        for cap_type in (CapabilityType.WORKLOAD, CapabilityType.TRAIT):
            rows.extend(
                (RefreshStatus.UNCHANGED, cap)
                for cap in report.unchanged
                if cap.type == cap_type
            )
        return rows

    rows = []
    for status in (RefreshStatus.ADDED, RefreshStatus.UPDATED, RefreshStatus.DELETED):
        rows.extend((status, cap) for cap in report[status])
    return rows


def headline(report: DiffReport) -> str:
    """Rich-formatted headline shown above the table."""
    if not report.has_changes:
        return "[green]Sync capabilities successfully[/] (no changes)"
    return (
        "[green]Sync capabilities successfully[/] "
        f"Add([green]{len(report.added)}[/]) "
        f"Update([yellow]{len(report.updated)}[/]) "
        f"Delete([red]{len(report.deleted)}[/])"
    )


def render_table(report: DiffReport) -> Table:
    """Build the TYPE / CATEGORY / DESCRIPTION table for a report."""
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("TYPE")
    table.add_column("CATEGORY")
    table.add_column("DESCRIPTION")

    for status, cap in report_rows(report):
        style = status_style(status)
        table.add_row(
            escape(f"{style.icon}{cap.name}"),
            cap.type.value,
            escape(cap.description),
            style=style.color or None,
        )
    return table


def format_json(result: SyncResult) -> str:
    """Format a refresh result as JSON.

    Args:
        result: The completed refresh.

    Returns:
        JSON string.
    """
    report = result.report
    return json.dumps({
        "cache_dir": str(result.cache_dir),
        "summary": summary_line(report),
        "has_changes": report.has_changes,
        "capabilities": {
            status.value.lower(): [
                {"name": cap.name, "type": cap.type.value, "description": cap.description}
                for cap in report[status]
            ]
            for status in RefreshStatus
        },
        "partial_failures": [str(issue) for issue in result.partial_failures],
    }, indent=2)
