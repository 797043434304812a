import json
from pathlib import Path

import pytest

from rqm.clean import run_clean
from rqm.errors import RegistryMissingError
from rqm.index import build_registry


def _load():
    return json.loads(Path("requirements/registry.json").read_text(encoding="utf-8"))


def _setup(corpus, settings):
    corpus("requirements/a.md", "# A <!-- rq-00000001 -->\n## Part <!-- rq-00000002 -->\n")
    corpus("requirements/b.md", "# B <!-- rq-00000003 -->\n")
    corpus("src/one.rs", "// rq-00000001\n")
    corpus("src/two.rs", "// rq-00000001 rq-00000002\n")
    build_registry(settings)


def test_missing_registry_is_fatal(corpus, settings):
    with pytest.raises(RegistryMissingError):
        run_clean(settings)


def test_nothing_to_clean(corpus, settings):
    _setup(corpus, settings)
    before = Path("requirements/registry.json").read_bytes()
    result = run_clean(settings)
    assert not result.changed
    assert Path("requirements/registry.json").read_bytes() == before


def test_deleted_document_drops_entry(corpus, settings):
    _setup(corpus, settings)
    Path("requirements/b.md").unlink()
    result = run_clean(settings)
    assert [rq_id for rq_id, _ in result.removed_entries] == ["rq-00000003"]
    assert "rq-00000003" not in _load()


def test_removed_annotation_drops_entry(corpus, settings):
    _setup(corpus, settings)
    corpus("requirements/a.md", "# A <!-- rq-00000001 -->\n## Part\n")
    result = run_clean(settings)
    assert [rq_id for rq_id, _ in result.removed_entries] == ["rq-00000002"]
    assert set(_load()) == {"rq-00000001", "rq-00000003"}


def test_deleted_reference_file_keeps_entry(corpus, settings):
    _setup(corpus, settings)
    Path("src/one.rs").unlink()
    corpus("src/two.rs", "// rq-00000002\n")
    result = run_clean(settings)
    assert result.removed_entries == []
    assert sorted(result.removed_refs) == [("rq-00000001", "src/one.rs"), ("rq-00000001", "src/two.rs")]
    data = _load()
    assert data["rq-00000001"]["refs"] == []
    assert data["rq-00000002"]["refs"] == [{"kind": "code", "file": "src/two.rs"}]
