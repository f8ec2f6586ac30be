"""
Reconcile -- classify a fresh capability snapshot against the cached one.

Every capability in the new snapshot is Added, Updated or Unchanged; every
capability of the old snapshot missing from the new one is Deleted. Lookup
is by name only, regardless of category.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence

from .models import Capability, equal_capability


class RefreshStatus(str, Enum):
    """Outcome of comparing one capability across two snapshots."""

    ADDED = "Added"
    UPDATED = "Updated"
    UNCHANGED = "Unchanged"
    DELETED = "Deleted"


@dataclass
class DiffReport:
    """Classification of two snapshots.

    Attributes:
        added: New capabilities, in new-snapshot order.
        updated: Changed capabilities (new values), in new-snapshot order.
        unchanged: Identical capabilities, in new-snapshot order.
        deleted: Vanished capabilities (old values), in old-snapshot order.
    """

    added: List[Capability] = field(default_factory=list)
    updated: List[Capability] = field(default_factory=list)
    unchanged: List[Capability] = field(default_factory=list)
    deleted: List[Capability] = field(default_factory=list)

    def __getitem__(self, status: RefreshStatus) -> List[Capability]:
        return self._buckets()[RefreshStatus(status)]

    def _buckets(self) -> Dict[RefreshStatus, List[Capability]]:
        return {
            RefreshStatus.ADDED: self.added,
            RefreshStatus.UPDATED: self.updated,
            RefreshStatus.UNCHANGED: self.unchanged,
            RefreshStatus.DELETED: self.deleted,
        }

    def counts(self) -> Dict[RefreshStatus, int]:
        """Number of capabilities per status."""
        return {status: len(caps) for status, caps in self._buckets().items()}

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.updated or self.deleted)

    def deleted_names(self) -> List[str]:
        return [cap.name for cap in self.deleted]


def diff(old: Sequence[Capability], new: Sequence[Capability]) -> DiffReport:
    """Classify the capabilities of two snapshots.

    Args:
        old: The cached snapshot.
        new: The freshly fetched snapshot.

    Returns:
        DiffReport whose buckets keep the order of the input they came from.
    """
    report = DiffReport()

    # Names are unique within a snapshot; setdefault keeps the first on a clash.
    old_by_name: Dict[str, Capability] = {}
    for cap in old:
        old_by_name.setdefault(cap.name, cap)
    new_names = {cap.name for cap in new}

    for cap in new:
        previous = old_by_name.get(cap.name)
        if previous is None:
            report.added.append(cap)
        elif equal_capability(previous, cap):
            report.unchanged.append(cap)
        else:
            report.updated.append(cap)

    for cap in old:
        if cap.name not in new_names:
            report.deleted.append(cap)

    return report
