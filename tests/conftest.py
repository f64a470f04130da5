import os
import sys
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cms import CmsStore, seed_catalog
from config.registry import FEEDBACK_KEY, bind_model, unbind_model
from config.settings import settings
from storage.migrate import migrate

CATALOG = ROOT / "config" / "catalog.yaml"


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    unbind_model(FEEDBACK_KEY)
    try:
        yield db_path
    finally:
        unbind_model(FEEDBACK_KEY)
        td.cleanup()


@pytest.fixture
def cms(tmp_db):
    store = CmsStore(Path(tmp_db))
    seed_catalog(store, str(CATALOG))
    return store


@pytest.fixture
def fake_feedback():
    calls = []

    def _feedback(**kwargs):
        calls.append(kwargs)
        return {"feedback": f"## What You Did\n- scored {kwargs['performance']['score']}"}

    bind_model(FEEDBACK_KEY, _feedback)
    return calls
