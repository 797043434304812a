"""Cross-check live identifier tokens against the registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .config import Settings
from .refs import scan_corpus
from .registry import load_registry


@dataclass
class CheckResult:
    stale: List[Tuple[Path, str]] = field(default_factory=list)
    unreferenced: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.stale


def run_check(settings: Settings) -> CheckResult:
    """Report unknown identifier tokens and entries nobody references.

    Unreferenced entries are informational only; ``ok`` reflects stale
    references alone.
    """
    registry = load_registry(settings.registry_path)
    result = CheckResult()
    for path, ids in sorted(scan_corpus(settings).items()):
        for rq_id in sorted(ids):
            if rq_id not in registry:
                result.stale.append((path, rq_id))
    result.unreferenced = sorted(rq_id for rq_id, entry in registry.items() if not entry.refs)
    return result
