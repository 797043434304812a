"""Find identifier tokens in arbitrary text files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Set

from .config import Settings
from .files import iter_corpus, read_text
from .ids import find_ids

logger = logging.getLogger(__name__)


def ref_path(path: Path) -> str:
    """Return the string stored for *path* in a reference record."""
    return path.as_posix()


def scan_file(path: Path) -> Set[str]:
    try:
        return find_ids(read_text(path, errors="replace"))
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return set()


def scan_files(paths: Iterable[Path]) -> Dict[Path, Set[str]]:
    """Map each file to the identifier tokens it contains (files without any are omitted)."""
    found: Dict[Path, Set[str]] = {}
    for path in paths:
        ids = scan_file(path)
        if ids:
            found[path] = ids
    return found


def scan_corpus(settings: Settings) -> Dict[Path, Set[str]]:
    """Scan implementation sources and requirement documents."""
    found = scan_files(iter_corpus(settings))
    logger.debug("found identifier tokens in %d files", len(found))
    return found
