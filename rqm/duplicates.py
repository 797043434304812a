"""Repair identifiers declared by more than one entity.

For an identifier declared exactly twice, the registry's stored declaration
decides which occurrence is the original: the one whose live declaration still
matches keeps the identifier and the other receives a fresh one. Anything else
(no stored declaration, both or neither matching, three or more occurrences)
is left for a human.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

from .config import Settings
from .files import as_replaced, read_text, write_text_atomic
from .ids import ANNOTATION_RE, TAG_LINE_RE, IdGenerator
from .index import Conflict, Occurrence
from .registry import load_decls
from .scanner import KIND_SCENARIO, iter_entities, split_lines
from .stamp import preload_ids

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fix:
    old_id: str
    new_id: str
    path: Path
    lineno: int


@dataclass
class FixResult:
    fixes: List[Fix] = field(default_factory=list)
    unresolved: List[Conflict] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unresolved


def _replace_id(line: str, kind: str, new_id: str) -> str:
    pattern = TAG_LINE_RE if kind == KIND_SCENARIO else ANNOTATION_RE
    m = pattern.search(line.rstrip("\r"))
    if m is None:
        raise ValueError(f"no identifier annotation in line {line!r}")
    return line[: m.start(1)] + new_id + line[m.end(1):]


def pick_copy(occurrences: Sequence[Occurrence], stored_decl: str | None) -> Occurrence | None:
    """Return the occurrence to renumber, or ``None`` if undecidable."""
    if len(occurrences) != 2 or stored_decl is None:
        return None
    # Stored declarations were read with errors="replace".
    matching = [occ for occ in occurrences if as_replaced(occ.decl) == stored_decl]
    if len(matching) != 1:
        return None
    return next(occ for occ in occurrences if occ is not matching[0])


def fix_duplicates(
    paths: Sequence[Path],
    settings: Settings,
    generator: IdGenerator,
    dry_run: bool = False,
) -> FixResult:
    lines_by_path: Dict[Path, List[str]] = {}
    declared: Dict[str, List[Occurrence]] = {}
    texts = {path: read_text(path) for path in paths}
    for path, text in texts.items():
        lines = split_lines(text)
        lines_by_path[path] = lines
        for entity in iter_entities(lines, settings.api_section_title, settings.scenario_language):
            if entity.rq_id is not None:
                declared.setdefault(entity.rq_id, []).append(Occurrence(path, entity))

    stored = load_decls(settings.registry_path)
    seen = preload_ids(texts) | set(stored)
    result = FixResult()
    changed: List[Path] = []

    for rq_id in sorted(declared):
        occurrences = declared[rq_id]
        if len(occurrences) < 2:
            continue
        copy = pick_copy(occurrences, stored.get(rq_id))
        if copy is None:
            result.unresolved.append(Conflict(rq_id, occurrences, stored.get(rq_id)))
            continue
        new_id = generator.generate(seen)
        lines = lines_by_path[copy.path]
        idx = copy.entity.id_index
        lines[idx] = _replace_id(lines[idx], copy.entity.kind, new_id)
        result.fixes.append(Fix(rq_id, new_id, copy.path, idx + 1))
        if copy.path not in changed:
            changed.append(copy.path)
        logger.debug("reassigned %s at %s:%d", rq_id, copy.path, idx + 1)

    if not dry_run:
        for path in changed:
            write_text_atomic(path, "\n".join(lines_by_path[path]))
            result.written.append(path)
    return result
