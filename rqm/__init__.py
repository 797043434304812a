"""Requirements traceability identifiers.

This package stamps stable ``rq-XXXXXXXX`` identifiers onto the structural
entities of markdown requirement documents (titles, sections, API bullets and
Gherkin scenarios) and maintains a JSON registry that cross-references every
file mentioning each identifier. The ``rqm`` command exposes the workflow:

  - ``stamp``: insert missing identifiers (or repair duplicates).
  - ``index``: rebuild the registry from the corpus.
  - ``check``: report stale references and unreferenced entries.
  - ``clean``: prune registry entries that no longer exist.
"""

__all__ = ["cli"]
__version__ = "0.1.0"
