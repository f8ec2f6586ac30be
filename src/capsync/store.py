"""
Capability Store -- the local cache of capability definitions.

One YAML record per capability, filed by category:

    <cache_dir>/workloads/<name>.yaml
    <cache_dir>/traits/<name>.yaml

Entries are keyed by name alone. Writing a capability replaces any cached
entry with the same name, even one filed under the other category.

No locking is done. Two refreshes running against the same cache race and
the last write or removal wins; capsync is a single-operator tool.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml
from pydantic import ValidationError

from .errors import StoreUnavailable
from .models import Capability, CapabilityType, is_cacheable_name

logger = logging.getLogger("capsync.store")

CATEGORY_DIRS: Dict[CapabilityType, str] = {
    CapabilityType.WORKLOAD: "workloads",
    CapabilityType.TRAIT: "traits",
}
RECORD_SUFFIX = ".yaml"


class CapabilityStore:
    """Read, write and delete cached capabilities.

    Args:
        cache_dir: Root directory of the capability cache.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir).expanduser()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load_all(self) -> List[Capability]:
        """Return every cached capability, workloads first then traits.

        Returns:
            Capabilities sorted by file name within each category. Empty
            when nothing has been cached yet.

        Raises:
            StoreUnavailable: If a directory or record cannot be read.
        """
        found: Dict[str, Capability] = {}
        for record_path in self._record_paths():
            cap = self._load_file(record_path)
            if cap.name in found:
                logger.warning(
                    "Duplicate capability %r in %s ignored", cap.name, record_path
                )
                continue
            found[cap.name] = cap
        return list(found.values())

    def get(self, name: str) -> Optional[Capability]:
        """Load a single cached capability by name.

        Raises:
            StoreUnavailable: If the record exists but cannot be read.
        """
        for category in CATEGORY_DIRS:
            path = self._path_for(name, category)
            if path.exists():
                return self._load_file(path)
        return None

    def write(self, capabilities: Iterable[Capability]) -> None:
        """Persist capabilities, replacing cached entries of the same name.

        Raises:
            StoreUnavailable: If a record cannot be written.
        """
        for cap in capabilities:
            target = self._path_for(cap.name, cap.type)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(
                    yaml.dump(cap.to_record(), default_flow_style=False, sort_keys=False),
                    encoding="utf-8",
                )
                for category in CATEGORY_DIRS:
                    if category != cap.type:
                        self._path_for(cap.name, category).unlink(missing_ok=True)
            except OSError as exc:
                raise StoreUnavailable(f"Cannot write {target}: {exc}") from exc
            logger.debug("Cached %s %s", cap.type.value, cap.name)

    def remove(self, names: Iterable[str]) -> List[str]:
        """Delete the cached entries with the given names.

        Unknown names are ignored.

        Returns:
            Names that were actually removed.

        Raises:
            StoreUnavailable: If a record cannot be deleted.
        """
        removed: List[str] = []
        for name in names:
            for category in CATEGORY_DIRS:
                path = self._path_for(name, category)
                if not path.exists():
                    continue
                try:
                    path.unlink()
                except OSError as exc:
                    raise StoreUnavailable(f"Cannot remove {path}: {exc}") from exc
                logger.info("Removed cached %s %s", category.value, name)
                if name not in removed:
                    removed.append(name)
        return removed

    def prune(self, survivors: Iterable[str]) -> List[str]:
        """Delete every cached entry whose name is not in ``survivors``.

        Returns:
            Names that were removed.

        Raises:
            StoreUnavailable: If the cache cannot be listed or a record deleted.
        """
        keep = set(survivors)
        stale = [p.stem for p in self._record_paths() if p.stem not in keep]
        return self.remove(stale)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _path_for(self, name: str, category: CapabilityType) -> Path:
        if not is_cacheable_name(name):
            raise StoreUnavailable(f"Refusing to cache capability named {name!r}")
        return self.cache_dir / CATEGORY_DIRS[category] / f"{name}{RECORD_SUFFIX}"

    def _record_paths(self) -> List[Path]:
        paths: List[Path] = []
        for dirname in CATEGORY_DIRS.values():
            category_dir = self.cache_dir / dirname
            if not category_dir.exists():
                continue
            try:
                entries = sorted(category_dir.iterdir())
            except OSError as exc:
                raise StoreUnavailable(f"Cannot list {category_dir}: {exc}") from exc
            paths.extend(
                p for p in entries if p.suffix == RECORD_SUFFIX and p.is_file()
            )
        return paths

    @staticmethod
    def _load_file(path: Path) -> Capability:
        """Parse and validate a single cached record.

        Raises:
            StoreUnavailable: If the file is unreadable or corrupt.
        """
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
            return Capability.from_record(raw)
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            raise StoreUnavailable(f"Cannot read cached capability {path}: {exc}") from exc
