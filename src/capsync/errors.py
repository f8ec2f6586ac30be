"""
Exception hierarchy for capsync.

Fatal refresh errors (LoadFailure, FetchFailure) are raised before the
cache is touched. PersistFailure is raised after the diff was computed
and carries it, because the cache may no longer match the report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .reconcile import DiffReport
    from .sources import FetchIssue


class CapsyncError(Exception):
    """Base class for every capsync error."""


class StoreUnavailable(CapsyncError):
    """Raised when the local capability cache cannot be read or written."""


class DefinitionError(CapsyncError):
    """Raised when a source definition document is malformed."""


class LoadFailure(CapsyncError):
    """Raised when the cached snapshot could not be loaded."""


class FetchFailure(CapsyncError):
    """Raised when the fresh snapshot could not be obtained from the source."""


class PartialFetchFailure(FetchFailure):
    """Raised in strict mode when some source documents could not be used.

    Args:
        issues: The per-document problems reported by the source.
    """

    def __init__(self, issues: list["FetchIssue"]) -> None:
        self.issues = list(issues)
        super().__init__(
            f"{len(self.issues)} definition(s) could not be fetched"
        )


class PersistFailure(CapsyncError):
    """Raised when writing or pruning the cache failed after diffing.

    Args:
        message: What went wrong.
        report: The diff that was computed before persistence failed.
        partial_failures: Source issues collected during the fetch.
    """

    def __init__(
        self,
        message: str,
        report: "DiffReport",
        partial_failures: Optional[list["FetchIssue"]] = None,
    ) -> None:
        super().__init__(message)
        self.report = report
        self.partial_failures = list(partial_failures or [])
