"""Shared fixtures data and fakes for rqm tests."""
from __future__ import annotations

from typing import Iterable


class ScriptedRandom:
    """Random source returning a fixed sequence; the last value repeats."""

    def __init__(self, values: Iterable[int]) -> None:
        self.values = list(values)
        self.calls = 0

    def getrandbits(self, k: int) -> int:
        self.calls += 1
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


def rid(n: int) -> str:
    return f"rq-{n:08x}"


SAMPLE_DOC = "\n".join(
    [
        "# Input Parsing",
        "Intro text.",
        "",
        "## API",
        "- `parse(path)`: reads a file",
        "  - `nested`: sub bullet",
        "- plain bullet without code",
        "* `Molecule::new` builds a molecule",
        "",
        "### Errors",
        "- `ParseError` raised on bad input",
        "",
        "## Behaviour",
        "- `not_api`: outside the API section",
        "",
        "#### Deep heading",
        "",
        "```gherkin",
        "Feature: parsing",
        "  Scenario: valid file",
        "    Given a file",
        "```",
        "",
        "```python",
        "# Not a title",
        "## Not a section",
        "```",
        "",
    ]
)

SAMPLE_DOC_STAMPED = "\n".join(
    [
        "# Input Parsing <!-- rq-00000001 -->",
        "Intro text.",
        "",
        "## API <!-- rq-00000002 -->",
        "- `parse(path)`: reads a file <!-- rq-00000003 -->",
        "  - `nested`: sub bullet",
        "- plain bullet without code",
        "* `Molecule::new` builds a molecule <!-- rq-00000004 -->",
        "",
        "### Errors <!-- rq-00000005 -->",
        "- `ParseError` raised on bad input <!-- rq-00000006 -->",
        "",
        "## Behaviour <!-- rq-00000007 -->",
        "- `not_api`: outside the API section",
        "",
        "#### Deep heading",
        "",
        "```gherkin",
        "Feature: parsing",
        "  @rq-00000008",
        "  Scenario: valid file",
        "    Given a file",
        "```",
        "",
        "```python",
        "# Not a title",
        "## Not a section",
        "```",
        "",
    ]
)
