"""Rebuild the registry from the document corpus and source tree."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import Settings
from .files import iter_documents, read_text
from .refs import ref_path, scan_corpus
from .registry import Entry, Reference, Registry, load_decls, save_registry
from .scanner import KIND_SECTION, Entity, scan_text

logger = logging.getLogger(__name__)

LIKELY_ORIGINAL = "likely original"
LIKELY_COPY = "likely copy"


@dataclass(frozen=True)
class Occurrence:
    """An entity declaring an identifier at a given place."""

    path: Path
    entity: Entity

    @property
    def lineno(self) -> int:
        return self.entity.lineno

    @property
    def decl(self) -> str:
        return self.entity.decl


@dataclass
class Conflict:
    rq_id: str
    occurrences: List[Occurrence]
    stored_decl: Optional[str] = None

    def verdicts(self) -> Optional[List[str]]:
        """Label each occurrence, or return ``None`` when inspection cannot tell."""
        if self.stored_decl is None:
            return None
        matches = [occ.decl == self.stored_decl for occ in self.occurrences]
        if matches.count(True) != 1:
            return None
        return [LIKELY_ORIGINAL if m else LIKELY_COPY for m in matches]


@dataclass
class IndexResult:
    registry: Registry = field(default_factory=dict)
    conflicts: List[Conflict] = field(default_factory=list)
    written: bool = False


def collect_declarations(settings: Settings, paths: Optional[List[Path]] = None) -> Dict[str, List[Occurrence]]:
    """Map every stamped identifier to the places declaring it."""
    found: Dict[str, List[Occurrence]] = defaultdict(list)
    for path in paths if paths is not None else iter_documents(settings):
        text = read_text(path, errors="replace")
        entities = scan_text(text, settings.api_section_title, settings.scenario_language)
        for entity in entities:
            if entity.rq_id is not None:
                found[entity.rq_id].append(Occurrence(path, entity))
    return dict(found)


def _entry_for(settings: Settings, occ: Occurrence) -> Entry:
    entity = occ.entity
    return Entry(
        kind=entity.kind,
        doc=settings.doc_key(occ.path),
        title=entity.title,
        decl=entity.decl,
        depth=entity.depth if entity.kind == KIND_SECTION else None,
    )


def find_conflicts(declared: Dict[str, List[Occurrence]], stored_decls: Dict[str, str]) -> List[Conflict]:
    return [
        Conflict(rq_id, occs, stored_decls.get(rq_id))
        for rq_id, occs in sorted(declared.items())
        if len(occs) > 1
    ]


def build_registry(settings: Settings, write: bool = True) -> IndexResult:
    """Rescan everything and persist the registry unless duplicates are found.

    When an identifier is declared more than once the previous registry file is
    left as is and the conflicts are returned for reporting.
    """
    declared = collect_declarations(settings)
    duplicated = {k: v for k, v in declared.items() if len(v) > 1}
    if duplicated:
        stored = load_decls(settings.registry_path)
        return IndexResult(conflicts=find_conflicts(duplicated, stored))

    registry: Registry = {}
    owner: Dict[str, Path] = {}
    for rq_id, (occ,) in declared.items():
        registry[rq_id] = _entry_for(settings, occ)
        owner[rq_id] = occ.path

    for path, ids in scan_corpus(settings).items():
        for rq_id in ids:
            if rq_id in registry and owner[rq_id] != path:
                registry[rq_id].refs.add(Reference(file=ref_path(path)))

    result = IndexResult(registry=registry)
    if write:
        save_registry(settings.registry_path, registry)
        result.written = True
        logger.debug("wrote %d entries to %s", len(registry), settings.registry_path)
    return result
