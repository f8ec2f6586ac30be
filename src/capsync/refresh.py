"""
Refresh -- one load, fetch, diff, persist cycle.

    capsync update  ->  load cache -> fetch source -> diff -> write -> remove stale

Nothing is written until both snapshots are in hand. Once the diff is
computed, a persistence error still hands the diff back (on the raised
PersistFailure) since the cache may already be partly rewritten.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .errors import (
    LoadFailure,
    PartialFetchFailure,
    PersistFailure,
    StoreUnavailable,
)
from .reconcile import DiffReport, diff
from .sources import CapabilitySource, FetchIssue
from .store import CapabilityStore

logger = logging.getLogger("capsync.refresh")


@dataclass
class SyncResult:
    """Outcome of a refresh cycle.

    Attributes:
        report: How the fresh snapshot differs from the cached one.
        cache_dir: The cache that was refreshed.
        partial_failures: Definitions the source had to skip.
    """

    report: DiffReport
    cache_dir: Path
    partial_failures: List[FetchIssue] = field(default_factory=list)


def refresh_capabilities(
    source: CapabilitySource,
    store: CapabilityStore,
    strict: bool = False,
) -> SyncResult:
    """Bring the local capability cache in line with ``source``.

    Args:
        source: Where the authoritative definitions come from.
        store: The local cache to update.
        strict: Abort without touching the cache when the source
            skipped any definition.

    Returns:
        SyncResult with the computed diff.

    Raises:
        LoadFailure: The cached snapshot could not be read.
        FetchFailure: The source could not be read (PartialFetchFailure
            in strict mode when definitions were skipped).
        PersistFailure: The cache could not be fully updated.
    """
    try:
        old = store.load_all()
    except StoreUnavailable as exc:
        raise LoadFailure(f"Cannot load cached capabilities: {exc}") from exc

    new, issues = source.fetch()
    if strict and issues:
        raise PartialFetchFailure(issues)

    report = diff(old, new)

    try:
        store.write(new)
        store.remove(report.deleted_names())
    except StoreUnavailable as exc:
        logger.error("Capability cache update failed: %s", exc)
        raise PersistFailure(str(exc), report, issues) from exc

    logger.info(
        "Refreshed %s: %d added, %d updated, %d deleted, %d unchanged",
        store.cache_dir,
        len(report.added),
        len(report.updated),
        len(report.deleted),
        len(report.unchanged),
    )
    return SyncResult(report=report, partial_failures=issues, cache_dir=store.cache_dir)
