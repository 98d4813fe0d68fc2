import json
import os
import sys

import pytest

# Path setup before any project imports to satisfy E402
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)


def _lazy_imports():
    from quarterplan.app_factory import create_app  # noqa: E402

    return create_app


@pytest.fixture
def tasks_file(tmp_path):
    return tmp_path / "tasks.json"


@pytest.fixture
def app(tasks_file):
    create_app = _lazy_imports()
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "tasks_file": str(tasks_file),
            "default_locale": "en",
        }
    )


@pytest.fixture
def client(app):
    c = app.test_client()
    c.environ_base = {}
    return c


@pytest.fixture
def seed_tasks(tasks_file):
    """Write raw records straight into the task file, bypassing the API."""

    def _seed(records):
        tasks_file.write_text(json.dumps(records), encoding="utf-8")
        return records

    return _seed


@pytest.fixture
def stored_tasks(tasks_file):
    def _read():
        return json.loads(tasks_file.read_text(encoding="utf-8"))

    return _read
