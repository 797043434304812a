"""Configuration loading for rqm.

Settings are read from ``.rqm.yml`` (or ``.rqm.json``) in the working
directory when present and merged over defaults. The two corpus roots and the
list of scanned source extensions can be overridden through environment
variables, which take precedence over the file.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Tuple

from .errors import ConfigError

DEFAULT_CONFIG_FILE = ".rqm.yml"

ENV_CONFIG = "RQM_CONFIG"
ENV_REQUIREMENTS_DIR = "RQM_REQUIREMENTS_DIR"
ENV_SOURCE_DIR = "RQM_SOURCE_DIR"
ENV_SOURCE_EXTENSIONS = "RQM_SOURCE_EXTENSIONS"


def default_config() -> Dict:
    return {
        "requirements_dir": "requirements",
        "source_dir": "src",
        "source_extensions": [".rs"],
        "document_extension": ".md",
        "registry_file": "registry.json",
        "api_section_title": "API",
        "scenario_language": "gherkin",
    }


def _normalize_extension(ext: str) -> str:
    ext = ext.strip()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def _read_file(cfg_path: Path) -> Dict:
    text = cfg_path.read_text(encoding="utf-8")
    try:
        if cfg_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            from ruamel.yaml import YAML

            data = YAML(typ="safe").load(text)
    except Exception as exc:
        raise ConfigError(f"failed to parse {cfg_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path}: expected a mapping at the top level")
    return data


def load_config(path: str | None = None, env: Mapping[str, str] | None = None) -> Dict:
    """Load configuration from *path*, ``$RQM_CONFIG`` or ``.rqm.yml``.

    ``.rqm.json`` is tried when the YAML file is absent. Environment overrides
    are applied last.
    """
    env = os.environ if env is None else env
    merged = default_config()
    cfg_path = Path(path or env.get(ENV_CONFIG) or DEFAULT_CONFIG_FILE)
    if not cfg_path.exists() and path is None and not env.get(ENV_CONFIG):
        cfg_path = cfg_path.with_suffix(".json")
    if cfg_path.exists():
        merged.update(_read_file(cfg_path))

    if env.get(ENV_REQUIREMENTS_DIR):
        merged["requirements_dir"] = env[ENV_REQUIREMENTS_DIR]
    if env.get(ENV_SOURCE_DIR):
        merged["source_dir"] = env[ENV_SOURCE_DIR]
    if env.get(ENV_SOURCE_EXTENSIONS):
        merged["source_extensions"] = env[ENV_SOURCE_EXTENSIONS].split(",")

    exts = merged["source_extensions"]
    if isinstance(exts, str):
        exts = exts.split(",")
    merged["source_extensions"] = [e for e in (_normalize_extension(x) for x in exts) if e]
    merged["document_extension"] = _normalize_extension(merged["document_extension"])
    return merged


@dataclass(frozen=True)
class Settings:
    requirements_dir: Path
    source_dir: Path
    source_extensions: Tuple[str, ...]
    document_extension: str
    registry_path: Path
    api_section_title: str
    scenario_language: str

    @classmethod
    def from_config(cls, cfg: Mapping) -> "Settings":
        req_dir = Path(cfg["requirements_dir"])
        return cls(
            requirements_dir=req_dir,
            source_dir=Path(cfg["source_dir"]),
            source_extensions=tuple(cfg["source_extensions"]),
            document_extension=cfg["document_extension"],
            registry_path=req_dir / cfg["registry_file"],
            api_section_title=str(cfg["api_section_title"]),
            scenario_language=str(cfg["scenario_language"]),
        )

    def doc_key(self, path: Path) -> str:
        """Return the registry ``doc`` value for a document path."""
        rel = path.relative_to(self.requirements_dir)
        return rel.with_suffix("").as_posix()

    def doc_path(self, doc: str) -> Path:
        return self.requirements_dir / f"{doc}{self.document_extension}"


def load_settings(path: str | None = None, env: Mapping[str, str] | None = None) -> Settings:
    return Settings.from_config(load_config(path, env))
