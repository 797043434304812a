"""Prune registry entries and references that no longer exist."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set, Tuple

from .config import Settings
from .refs import scan_file
from .registry import Registry, load_registry, save_registry

logger = logging.getLogger(__name__)


@dataclass
class CleanResult:
    removed_entries: List[Tuple[str, str]] = field(default_factory=list)
    removed_refs: List[Tuple[str, str]] = field(default_factory=list)
    registry: Registry = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.removed_entries or self.removed_refs)


def run_clean(settings: Settings, write: bool = True) -> CleanResult:
    """Drop stale entries and references, persisting the result if anything changed.

    ``removed_entries`` pairs each dropped identifier with the reason;
    ``removed_refs`` pairs an identifier with the file no longer referencing it.
    """
    registry = load_registry(settings.registry_path)
    cache: Dict[Path, Set[str]] = {}

    def ids_in(path: Path) -> Set[str]:
        if path not in cache:
            cache[path] = scan_file(path) if path.is_file() else set()
        return cache[path]

    result = CleanResult()
    kept: Registry = {}
    for rq_id in sorted(registry):
        entry = registry[rq_id]
        doc_path = settings.doc_path(entry.doc)
        if not doc_path.is_file():
            result.removed_entries.append((rq_id, f"document {doc_path.as_posix()} no longer exists"))
            continue
        if rq_id not in ids_in(doc_path):
            result.removed_entries.append((rq_id, f"no longer present in {doc_path.as_posix()}"))
            continue
        live_refs = set()
        for ref in sorted(entry.refs):
            if rq_id in ids_in(Path(ref.file)):
                live_refs.add(ref)
            else:
                result.removed_refs.append((rq_id, ref.file))
        entry.refs = live_refs
        kept[rq_id] = entry

    result.registry = kept
    if result.changed and write:
        save_registry(settings.registry_path, kept)
        logger.debug("wrote %d entries to %s", len(kept), settings.registry_path)
    return result
