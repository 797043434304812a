"""Corpus file discovery and whole-file I/O."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, List

from .config import Settings


def _walk(root: Path, suffixes: Iterable[str]) -> List[Path]:
    if not root.is_dir():
        return []
    wanted = {s.lower() for s in suffixes}
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in wanted)


def iter_documents(settings: Settings) -> List[Path]:
    """Return every requirement document under the requirements root."""
    return _walk(settings.requirements_dir, [settings.document_extension])


def iter_source_files(settings: Settings) -> List[Path]:
    """Return every implementation source file with a configured extension."""
    return _walk(settings.source_dir, settings.source_extensions)


def iter_corpus(settings: Settings) -> List[Path]:
    """Return source files followed by documents, without repeats."""
    seen = set()
    files: List[Path] = []
    for path in iter_source_files(settings) + iter_documents(settings):
        if path not in seen:
            seen.add(path)
            files.append(path)
    return files


def read_text(path: Path, errors: str = "surrogateescape") -> str:
    """Read *path* for rewriting.

    ``surrogateescape`` and ``newline=""`` keep undecodable bytes and CRLF line
    endings intact through :func:`write_text_atomic`. Read-only scans pass
    ``errors="replace"``.
    """
    with path.open("r", encoding="utf-8", errors=errors, newline="") as f:
        return f.read()


def write_text_atomic(path: Path, text: str) -> None:
    """Replace *path* with *text* via a temporary file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def as_replaced(text: str) -> str:
    """Return *text* as a ``errors="replace"`` read would have produced it."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
