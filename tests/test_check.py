import pytest

from rqm.check import run_check
from rqm.errors import RegistryMissingError
from rqm.index import build_registry


def test_missing_registry_is_fatal(corpus, settings):
    with pytest.raises(RegistryMissingError, match="rqm index"):
        run_check(settings)


def test_clean_corpus_passes_with_warnings(corpus, settings):
    corpus("requirements/a.md", "# A <!-- rq-00000001 -->\n## B <!-- rq-00000002 -->\n")
    corpus("src/lib.rs", "// rq-00000001\n")
    build_registry(settings)
    result = run_check(settings)
    assert result.ok
    assert result.stale == []
    assert result.unreferenced == ["rq-00000002"]


def test_stale_reference_fails(corpus, settings):
    corpus("requirements/a.md", "# A <!-- rq-00000001 -->\n")
    build_registry(settings)
    src = corpus("src/lib.rs", "// rq-deadbeef\n// rq-00000001\n")
    result = run_check(settings)
    assert not result.ok
    assert result.stale == [(src, "rq-deadbeef")]


def test_new_unindexed_declaration_is_stale(corpus, settings):
    corpus("requirements/a.md", "# A <!-- rq-00000001 -->\n")
    build_registry(settings)
    doc = corpus("requirements/b.md", "# B <!-- rq-00000002 -->\n")
    assert run_check(settings).stale == [(doc, "rq-00000002")]
