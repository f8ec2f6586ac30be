"""
Capability sources -- where fresh definitions come from.

A source hands back the authoritative snapshot together with the
documents it had to skip. The refresh decides what to do with those.

Directory: WorkloadDefinition / TraitDefinition manifests exported into
a directory (``kubectl get ... -o yaml``, a git checkout, a mounted volume).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from .errors import DefinitionError, FetchFailure
from .models import DEFINITION_KINDS, Capability, CapabilityType

logger = logging.getLogger("capsync.sources")

MANIFEST_SUFFIXES = (".yaml", ".yml")


@dataclass
class FetchIssue:
    """A definition the source could not turn into a capability."""

    source: str
    message: str
    category: Optional[CapabilityType] = None

    def __str__(self) -> str:
        prefix = f"{self.category.value} " if self.category else ""
        return f"{prefix}{self.source}: {self.message}"


class CapabilitySource(ABC):
    """Abstract provider of the authoritative capability snapshot."""

    @abstractmethod
    def fetch(self) -> Tuple[List[Capability], List[FetchIssue]]:
        """Fetch every workload and trait definition.

        Returns:
            (capabilities, issues). Workloads come before traits.

        Raises:
            FetchFailure: If the source cannot be read at all.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name."""


class DirectorySource(CapabilitySource):
    """Reads definition manifests from a directory tree.

    Every ``*.yaml``/``*.yml`` file below ``path`` is parsed, multi-document
    files included. Documents of other kinds are ignored.

    Args:
        path: Directory holding the exported definitions.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    @property
    def name(self) -> str:
        return f"directory:{self.path}"

    def fetch(self) -> Tuple[List[Capability], List[FetchIssue]]:
        documents, issues = self._read_documents()

        capabilities: List[Capability] = []
        seen: set[str] = set()
        for category in (CapabilityType.WORKLOAD, CapabilityType.TRAIT):
            for origin, doc in documents:
                kind = doc.get("kind")
                if not isinstance(kind, str) or DEFINITION_KINDS.get(kind) != category:
                    continue
                try:
                    cap = Capability.from_definition(doc)
                except DefinitionError as exc:
                    issues.append(FetchIssue(origin, str(exc), category))
                    continue
                if cap.name in seen:
                    issues.append(
                        FetchIssue(origin, f"duplicate capability name {cap.name!r}", category)
                    )
                    continue
                seen.add(cap.name)
                capabilities.append(cap)

        for issue in issues:
            logger.warning("Skipped definition %s", issue)
        logger.info(
            "Fetched %d capabilities from %s (%d skipped)",
            len(capabilities), self.name, len(issues),
        )
        return capabilities, issues

    def _read_documents(self) -> Tuple[List[Tuple[str, dict]], List[FetchIssue]]:
        """Parse every manifest file under the source directory.

        Raises:
            FetchFailure: If the directory is missing or unreadable.
        """
        if not self.path.is_dir():
            raise FetchFailure(f"Definition source not found: {self.path}")

        try:
            files = sorted(
                p for p in self.path.rglob("*")
                if p.suffix in MANIFEST_SUFFIXES and p.is_file()
            )
        except OSError as exc:
            raise FetchFailure(f"Cannot list {self.path}: {exc}") from exc

        documents: List[Tuple[str, dict]] = []
        issues: List[FetchIssue] = []
        for manifest in files:
            origin = str(manifest.relative_to(self.path))
            try:
                parsed = list(yaml.safe_load_all(manifest.read_text(encoding="utf-8")))
            except OSError as exc:
                raise FetchFailure(f"Cannot read {manifest}: {exc}") from exc
            except yaml.YAMLError as exc:
                issues.append(FetchIssue(origin, f"invalid YAML: {exc}"))
                continue
            for doc in parsed:
                if isinstance(doc, dict):
                    documents.append((origin, doc))
        return documents, issues
