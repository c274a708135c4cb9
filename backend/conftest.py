import sys
from pathlib import Path

import pytest


# Put backend/src on sys.path so tests import `config`, `models` and `services.*` directly.
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep a developer's DATE_IDEAS_* settings out of the tests."""
    for name in ("DATE_IDEAS_API_URL", "DATE_IDEAS_OFFLINE", "DATE_IDEAS_CACHE_TTL", "DATE_IDEAS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
