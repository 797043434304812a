"""Identifier format and the collision-checked generator."""
from __future__ import annotations

import logging
import random
import re
from typing import Protocol, Set

from .errors import IdExhaustedError

logger = logging.getLogger(__name__)

ID_RE = re.compile(r"\brq-[0-9a-f]{8}\b")
ID_FULL_RE = re.compile(r"rq-[0-9a-f]{8}")
# Trailing inline annotation on headings and API bullets.
ANNOTATION_RE = re.compile(r"\s*<!--\s*(rq-[0-9a-f]{8})\s*-->\s*$")
# Standalone Gherkin tag line preceding a ``Scenario:`` line.
TAG_LINE_RE = re.compile(r"^\s*@(rq-[0-9a-f]{8})\s*$")

MAX_ATTEMPTS = 100


class RandomSource(Protocol):
    def getrandbits(self, k: int) -> int: ...


def is_valid_id(value: str) -> bool:
    return ID_FULL_RE.fullmatch(value) is not None


def find_ids(text: str) -> Set[str]:
    """Return every identifier token appearing in *text*."""
    return set(ID_RE.findall(text))


def annotation(rq_id: str) -> str:
    return f"<!-- {rq_id} -->"


def tag_line(rq_id: str, indent: str = "") -> str:
    return f"{indent}@{rq_id}"


class IdGenerator:
    """Draw identifiers uniformly from a 32-bit space.

    ``rng`` only needs ``getrandbits``; tests pass ``random.Random(seed)`` or a
    scripted fake to make collisions reproducible.
    """

    def __init__(self, rng: RandomSource | None = None, max_attempts: int = MAX_ATTEMPTS) -> None:
        self.rng = rng if rng is not None else random.SystemRandom()
        self.max_attempts = max_attempts

    def generate(self, seen: Set[str]) -> str:
        """Return an identifier not in *seen* and add it to *seen*."""
        for attempt in range(self.max_attempts):
            candidate = f"rq-{self.rng.getrandbits(32):08x}"
            if candidate not in seen:
                seen.add(candidate)
                return candidate
            logger.debug("identifier collision on %s (attempt %d)", candidate, attempt + 1)
        raise IdExhaustedError(
            f"could not generate a unique identifier after {self.max_attempts} attempts; "
            "check the random source"
        )
