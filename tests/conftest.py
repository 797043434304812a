import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from rqm.config import load_settings  # noqa: E402
from rqm.ids import IdGenerator  # noqa: E402
from tests.helpers import ScriptedRandom  # noqa: E402

_ENV_KEYS = ("RQM_CONFIG", "RQM_REQUIREMENTS_DIR", "RQM_SOURCE_DIR", "RQM_SOURCE_EXTENSIONS")


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test inside its own temporary working directory."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def settings():
    return load_settings(env={})


@pytest.fixture
def corpus(isolated_cwd):
    """Create the default ``requirements/`` and ``src/`` roots and return a writer."""
    (isolated_cwd / "requirements").mkdir()
    (isolated_cwd / "src").mkdir()

    def write(rel: str, text: str) -> Path:
        path = Path(rel)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def counting_generator():
    """Generator yielding rq-00000001, rq-00000002, ... in order."""
    return IdGenerator(ScriptedRandom(range(1, 1000)))
