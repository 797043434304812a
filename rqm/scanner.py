"""Line scanner classifying requirement document structure.

The scanner walks a markdown document once, tracking fenced-code context, and
yields one :class:`Entity` per line that is eligible for an identifier:

  - ``file``: a level-1 heading (the document title).
  - ``section``: a level-2 or level-3 heading.
  - ``api-item``: a top-level bullet inside the API section that mentions a
    backtick-quoted name.
  - ``scenario``: a ``Scenario:`` line inside a Gherkin fence. Its identifier
    lives on a ``@rq-XXXXXXXX`` tag line directly above it.

Lines inside any other fenced block are never classified. The same scanner is
used by ``stamp`` (to find entities missing an identifier) and by ``index``
(to read declarations).
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .ids import ANNOTATION_RE, TAG_LINE_RE

FENCE_OPEN_RE = re.compile(r"^\s*(```+|~~~+)\s*([\w+-]*)")
FENCE_CLOSE_RE = re.compile(r"^\s*(`{3,}|~{3,})\s*$")
HEADING_RE = re.compile(r"^(#{1,3})\s+(.*)$")
BULLET_RE = re.compile(r"^[-*+]\s+(.*)$")
QUOTED_NAME_RE = re.compile(r"`[^`\s][^`]*`")
SCENARIO_RE = re.compile(r"^(\s*)Scenario:\s*(.*?)\s*$")

KIND_FILE = "file"
KIND_SECTION = "section"
KIND_API_ITEM = "api-item"
KIND_SCENARIO = "scenario"


class State(enum.Enum):
    NORMAL = "normal"
    IN_SCENARIO_FENCE = "in-scenario-fence"
    IN_OTHER_FENCE = "in-other-fence"


@dataclass(frozen=True)
class Entity:
    """One structural entity found in a document.

    ``index`` is the 0-based position in the list of lines; ``lineno`` is the
    1-based line number for reports. ``tag_index`` is set for scenarios whose
    preceding line is a valid identifier tag.
    """

    kind: str
    index: int
    raw: str
    title: str
    rq_id: Optional[str] = None
    depth: Optional[int] = None
    tag_index: Optional[int] = None

    @property
    def lineno(self) -> int:
        return self.index + 1

    @property
    def decl(self) -> str:
        return declaration(self.raw)

    @property
    def id_index(self) -> Optional[int]:
        """Index of the line carrying the identifier, if any."""
        if self.rq_id is None:
            return None
        return self.tag_index if self.kind == KIND_SCENARIO else self.index


def strip_annotation(line: str) -> str:
    return ANNOTATION_RE.sub("", line)


def declaration(line: str) -> str:
    """Return the declaration text of *line*: annotation removed, trimmed."""
    return strip_annotation(line.rstrip("\r\n")).strip()


def split_lines(text: str) -> List[str]:
    """Split document text on ``\\n`` so that joining with ``\\n`` is lossless."""
    return text.split("\n")


def _existing_id(line: str) -> Optional[str]:
    m = ANNOTATION_RE.search(line.rstrip("\r"))
    return m.group(1) if m else None


def _closes(line: str, fence: str) -> bool:
    """A closing fence uses the opening character, at least as many times."""
    m = FENCE_CLOSE_RE.match(line)
    return bool(m) and m.group(1)[0] == fence[0] and len(m.group(1)) >= len(fence)


def iter_entities(
    lines: List[str],
    api_section_title: str = "API",
    scenario_language: str = "gherkin",
) -> Iterator[Entity]:
    """Yield entities from *lines* in document order."""
    state = State.NORMAL
    fence = ""
    in_api = False
    scenario_lang = scenario_language.lower()

    for index, raw in enumerate(lines):
        line = raw.rstrip("\r")

        if state is State.NORMAL:
            m = FENCE_OPEN_RE.match(line)
            if m:
                fence = m.group(1)
                if m.group(2).lower() == scenario_lang:
                    state = State.IN_SCENARIO_FENCE
                else:
                    state = State.IN_OTHER_FENCE
                continue
        elif _closes(line, fence):
            state = State.NORMAL
            continue

        if state is State.IN_OTHER_FENCE:
            continue

        if state is State.IN_SCENARIO_FENCE:
            m = SCENARIO_RE.match(line)
            if not m:
                continue
            tag_index = None
            rq_id = None
            if index > 0:
                tag = TAG_LINE_RE.match(lines[index - 1].rstrip("\r"))
                if tag:
                    tag_index = index - 1
                    rq_id = tag.group(1)
            yield Entity(
                kind=KIND_SCENARIO,
                index=index,
                raw=raw,
                title=m.group(2),
                rq_id=rq_id,
                tag_index=tag_index,
            )
            continue

        m = HEADING_RE.match(line)
        if m:
            depth = len(m.group(1))
            title = strip_annotation(m.group(2)).strip()
            if depth == 1:
                in_api = False
            elif depth == 2:
                in_api = title == api_section_title
            yield Entity(
                kind=KIND_FILE if depth == 1 else KIND_SECTION,
                index=index,
                raw=raw,
                title=title,
                rq_id=_existing_id(line),
                depth=depth,
            )
            continue

        if in_api:
            m = BULLET_RE.match(line)
            if m and QUOTED_NAME_RE.search(strip_annotation(m.group(1))):
                yield Entity(
                    kind=KIND_API_ITEM,
                    index=index,
                    raw=raw,
                    title=strip_annotation(m.group(1)).strip(),
                    rq_id=_existing_id(line),
                )


def scan_text(
    text: str,
    api_section_title: str = "API",
    scenario_language: str = "gherkin",
) -> List[Entity]:
    return list(iter_entities(split_lines(text), api_section_title, scenario_language))
