"""Insert missing identifiers into requirement documents."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Set, Tuple

from .config import Settings
from .files import read_text, write_text_atomic
from .ids import IdGenerator, annotation, find_ids, tag_line
from .scanner import KIND_SCENARIO, Entity, iter_entities, split_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stamp:
    path: Path
    lineno: int
    kind: str
    rq_id: str
    decl: str


@dataclass
class StampResult:
    stamps: List[Stamp] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)


def _append_annotation(line: str, rq_id: str) -> str:
    eol = "\r" if line.endswith("\r") else ""
    return f"{line.rstrip()} {annotation(rq_id)}{eol}"


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def stamp_text(
    text: str,
    seen: Set[str],
    generator: IdGenerator,
    api_section_title: str = "API",
    scenario_language: str = "gherkin",
) -> Tuple[str, List[Tuple[Entity, str]]]:
    """Return *text* with an identifier added to every unstamped entity.

    Identifiers are drawn in document order and registered in *seen*. Lines of
    already stamped entities are left untouched.
    """
    lines = split_lines(text)
    pending = [e for e in iter_entities(lines, api_section_title, scenario_language) if e.rq_id is None]
    if not pending:
        return text, []

    assigned = [(entity, generator.generate(seen)) for entity in pending]
    # Splice bottom-up so inserted tag lines do not shift later indices.
    for entity, rq_id in reversed(assigned):
        if entity.kind == KIND_SCENARIO:
            line = lines[entity.index]
            eol = "\r" if line.endswith("\r") else ""
            lines.insert(entity.index, tag_line(rq_id, _indent_of(line)) + eol)
        else:
            lines[entity.index] = _append_annotation(lines[entity.index], rq_id)
    return "\n".join(lines), assigned


def preload_ids(texts: Dict[Path, str]) -> Set[str]:
    """Collect every identifier already present across the batch."""
    seen: Set[str] = set()
    for text in texts.values():
        seen |= find_ids(text)
    return seen


def stamp_files(
    paths: Sequence[Path],
    settings: Settings,
    generator: IdGenerator,
    dry_run: bool = False,
) -> StampResult:
    """Stamp every document in *paths*.

    All identifiers already present in the batch are loaded before any
    document is processed, so new identifiers are unique across the batch.
    Nothing is written if the generator gives up part way through.
    """
    texts = {path: read_text(path) for path in paths}
    seen = preload_ids(texts)
    logger.debug("preloaded %d identifiers from %d documents", len(seen), len(texts))

    result = StampResult()
    updated: Dict[Path, str] = {}
    for path, text in texts.items():
        new_text, assigned = stamp_text(
            text, seen, generator, settings.api_section_title, settings.scenario_language
        )
        for entity, rq_id in assigned:
            result.stamps.append(Stamp(path, entity.lineno, entity.kind, rq_id, entity.decl))
        if assigned:
            updated[path] = new_text

    if not dry_run:
        for path, new_text in updated.items():
            write_text_atomic(path, new_text)
            result.written.append(path)
            logger.debug("rewrote %s", path)
    return result
