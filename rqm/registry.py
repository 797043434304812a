"""Registry entries and their JSON persistence.

The registry maps each identifier to the entity that declares it::

    {
      "rq-1a2b3c4d": {
        "kind": "section",
        "doc": "input",
        "title": "Parsing",
        "decl": "## Parsing",
        "depth": 2,
        "refs": [{"kind": "code", "file": "src/input.rs"}]
      }
    }

``depth`` is only present for sections. ``refs`` holds one record per file
mentioning the identifier, sorted by file.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

from .errors import RegistryFormatError, RegistryMissingError
from .files import write_text_atomic

REF_KIND_CODE = "code"


@dataclass(frozen=True, order=True)
class Reference:
    file: str
    kind: str = REF_KIND_CODE

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "file": self.file}


@dataclass
class Entry:
    kind: str
    doc: str
    title: str
    decl: str
    depth: Optional[int] = None
    refs: Set[Reference] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind,
            "doc": self.doc,
            "title": self.title,
            "decl": self.decl,
            "refs": [r.to_dict() for r in sorted(self.refs)],
        }
        if self.depth is not None:
            data["depth"] = self.depth
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        refs = {
            Reference(file=r["file"], kind=r.get("kind", REF_KIND_CODE))
            for r in data.get("refs") or []
        }
        return cls(
            kind=data["kind"],
            doc=data["doc"],
            title=data.get("title", ""),
            decl=data.get("decl", ""),
            depth=data.get("depth"),
            refs=refs,
        )


Registry = Dict[str, Entry]


def dumps(registry: Registry) -> str:
    """Serialise *registry* deterministically."""
    data = {rq_id: registry[rq_id].to_dict() for rq_id in sorted(registry)}
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def loads(text: str, source: str = "registry") -> Registry:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RegistryFormatError(f"failed to parse {source}: {exc}") from exc
    if not isinstance(data, dict):
        raise RegistryFormatError(f"{source}: expected a JSON object")
    registry: Registry = {}
    for rq_id, raw in data.items():
        try:
            registry[rq_id] = Entry.from_dict(raw)
        except (KeyError, TypeError, AttributeError) as exc:
            raise RegistryFormatError(f"{source}: malformed entry {rq_id}: {exc}") from exc
    return registry


def load_registry(path: Path) -> Registry:
    """Load the registry at *path*; raise if it does not exist."""
    if not path.exists():
        raise RegistryMissingError(f"registry {path} not found; run 'rqm index' first")
    return loads(path.read_text(encoding="utf-8"), str(path))


def load_registry_if_present(path: Path) -> Optional[Registry]:
    if not path.exists():
        return None
    return load_registry(path)


def load_decls(path: Path) -> Dict[str, str]:
    """Return the stored declaration of every identifier, or ``{}``."""
    registry = load_registry_if_present(path)
    if registry is None:
        return {}
    return {rq_id: entry.decl for rq_id, entry in registry.items()}


def save_registry(path: Path, registry: Registry) -> None:
    write_text_atomic(path, dumps(registry))
