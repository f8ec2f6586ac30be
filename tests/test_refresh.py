"""Tests for the refresh cycle."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import pytest
import yaml

from capsync.errors import (
    FetchFailure,
    LoadFailure,
    PartialFetchFailure,
    PersistFailure,
    StoreUnavailable,
)
from capsync.models import Capability, CapabilityType
from capsync.reconcile import DiffReport
from capsync.refresh import SyncResult, refresh_capabilities
from capsync.sources import CapabilitySource, DirectorySource, FetchIssue
from capsync.store import CapabilityStore


def _workload(name: str, description: str = "v1") -> Capability:
    return Capability(name=name, type=CapabilityType.WORKLOAD, description=description)


def _trait(name: str, description: str = "v1") -> Capability:
    return Capability(name=name, type=CapabilityType.TRAIT, description=description)


class StaticSource(CapabilitySource):
    """Source returning a fixed snapshot, or failing."""

    def __init__(
        self,
        caps: List[Capability],
        issues: Optional[List[FetchIssue]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.caps = caps
        self.issues = issues or []
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return "static"

    def fetch(self) -> Tuple[List[Capability], List[FetchIssue]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.caps), list(self.issues)


class BrokenRemoveStore(CapabilityStore):
    """Store whose deletions always fail."""

    def remove(self, names):
        names = list(names)
        if names:
            raise StoreUnavailable("disk went away")
        return []


def _cached(store: CapabilityStore) -> dict:
    return {c.name: c for c in store.load_all()}


class TestRefreshCycle:
    """End-to-end refresh against a real store."""

    def test_first_refresh_adds_everything(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        source = StaticSource([_workload("X"), _trait("Y")])

        result = refresh_capabilities(source, store)

        assert [c.name for c in result.report.added] == ["X", "Y"]
        assert set(_cached(store)) == {"X", "Y"}
        assert result.cache_dir == cache_dir

    def test_refresh_applies_update_add_delete(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        store.write([_workload("A"), _workload("B")])

        result = refresh_capabilities(
            StaticSource([_workload("A", "modified"), _workload("C")]), store
        )

        report = result.report
        assert [c.name for c in report.updated] == ["A"]
        assert [c.name for c in report.added] == ["C"]
        assert [c.name for c in report.deleted] == ["B"]

        cached = _cached(store)
        assert set(cached) == {"A", "C"}
        assert cached["A"].description == "modified"

    def test_added_capability_leaves_existing_untouched(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        store.write([_workload("X", "original")])

        result = refresh_capabilities(
            StaticSource([_workload("X", "original"), _workload("Y")]), store
        )

        assert [c.name for c in result.report.unchanged] == ["X"]
        assert result.report.deleted == []
        cached = _cached(store)
        assert set(cached) == {"X", "Y"}
        assert cached["X"].description == "original"

    def test_second_refresh_reports_no_changes(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        source = StaticSource([_workload("X"), _trait("Y")])
        refresh_capabilities(source, store)

        result = refresh_capabilities(source, store)

        assert not result.report.has_changes
        assert [c.name for c in result.report.unchanged] == ["X", "Y"]

    def test_empty_source_clears_cache(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        store.write([_workload("X"), _trait("Y")])

        result = refresh_capabilities(StaticSource([]), store)

        assert [c.name for c in result.report.deleted] == ["X", "Y"]
        assert store.load_all() == []

    def test_partial_failures_passed_through(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        issue = FetchIssue("bad.yaml", "invalid YAML")

        result = refresh_capabilities(StaticSource([_workload("X")], [issue]), store)

        assert result.partial_failures == [issue]
        assert set(_cached(store)) == {"X"}

    def test_unusable_name_skipped_and_stale_entry_removed(
        self, cache_dir: Path, source_dir: Path
    ):
        store = CapabilityStore(cache_dir)
        store.write([_workload("stale")])
        (source_dir / "defs.yaml").write_text(yaml.safe_dump_all([
            {"kind": "WorkloadDefinition", "metadata": {"name": "aaa"}},
            {"kind": "WorkloadDefinition", "metadata": {"name": ".hidden"}},
        ]))

        result = refresh_capabilities(DirectorySource(source_dir), store)

        assert [c.name for c in result.report.added] == ["aaa"]
        assert [c.name for c in result.report.deleted] == ["stale"]
        assert len(result.partial_failures) == 1
        assert set(_cached(store)) == {"aaa"}


class TestRefreshFailures:
    """Failure handling of the refresh cycle."""

    def test_load_failure_aborts_before_fetch(self, cache_dir: Path):
        (cache_dir / "workloads").mkdir()
        (cache_dir / "workloads" / "broken.yaml").write_text("{not: valid")
        source = StaticSource([_workload("X")])

        with pytest.raises(LoadFailure):
            refresh_capabilities(source, CapabilityStore(cache_dir))

        assert source.calls == 0
        assert not (cache_dir / "workloads" / "X.yaml").exists()

    def test_fetch_failure_leaves_cache_untouched(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        store.write([_workload("A")])
        source = StaticSource([], error=FetchFailure("source unreachable"))

        with pytest.raises(FetchFailure, match="unreachable"):
            refresh_capabilities(source, store)

        assert set(_cached(store)) == {"A"}

    def test_strict_mode_aborts_on_partial_failure(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        store.write([_workload("A")])
        issue = FetchIssue("bad.yaml", "invalid YAML")
        source = StaticSource([_workload("B")], [issue])

        with pytest.raises(PartialFetchFailure) as excinfo:
            refresh_capabilities(source, store, strict=True)

        assert excinfo.value.issues == [issue]
        assert isinstance(excinfo.value, FetchFailure)
        assert set(_cached(store)) == {"A"}

    def test_strict_mode_without_issues_proceeds(self, cache_dir: Path):
        store = CapabilityStore(cache_dir)
        result = refresh_capabilities(StaticSource([_workload("B")]), store, strict=True)
        assert [c.name for c in result.report.added] == ["B"]

    def test_persist_failure_still_carries_report(self, cache_dir: Path):
        store = BrokenRemoveStore(cache_dir)
        store.write([_workload("A"), _workload("B")])
        issue = FetchIssue("bad.yaml", "invalid YAML")

        with pytest.raises(PersistFailure) as excinfo:
            refresh_capabilities(StaticSource([_workload("A", "v2")], [issue]), store)

        report = excinfo.value.report
        assert [c.name for c in report.updated] == ["A"]
        assert [c.name for c in report.deleted] == ["B"]
        assert excinfo.value.partial_failures == [issue]
        # Writes landed before the prune failed.
        assert _cached(store)["A"].description == "v2"


class TestSyncResult:
    """Tests for the SyncResult container."""

    def test_cache_dir_is_required(self):
        with pytest.raises(TypeError):
            SyncResult(report=DiffReport())

    def test_partial_failures_default_empty(self, cache_dir: Path):
        result = SyncResult(report=DiffReport(), cache_dir=cache_dir)
        assert result.partial_failures == []
