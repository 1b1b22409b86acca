# tests/conftest.py
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# now imports work
from feedback_api.main import app  # noqa


from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from feedback_api.core.config import get_settings, Settings
from feedback_api.schemas.forms import Question
from feedback_api.services import store as store_mod

OWNER = "user-alice"
OTHER = "user-bob"


@pytest.fixture()
def tmp_repo(tmp_path: Path) -> Path:
    """
    Create a temp repo-like structure so tests don't touch your real db/logs.
    """
    (tmp_path / "data" / "stores").mkdir(parents=True, exist_ok=True)
    (tmp_path / "logs").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture()
def test_settings(tmp_repo: Path) -> Settings:
    """
    Override Settings so API + services use temp paths.
    """
    s = Settings()
    s.repo_root = str(tmp_repo)
    s.data_dir = "data"
    s.logs_dir = "logs"
    s.sqlite_path = "data/stores/feedback_forms.sqlite"
    s.public_base_url = "https://forms.example.test"
    return s


@pytest.fixture()
def client(test_settings: Settings):
    """
    FastAPI client with dependency override.
    """
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def sqlite_path(test_settings: Settings) -> Path:
    return test_settings.abs_sqlite_path()


@pytest.fixture()
def init_test_db(sqlite_path: Path) -> Path:
    store_mod.init_db(sqlite_path)
    return sqlite_path


@pytest.fixture()
def owner_headers() -> Dict[str, str]:
    return {"X-User-Id": OWNER}


@pytest.fixture()
def other_headers() -> Dict[str, str]:
    return {"X-User-Id": OTHER}


def q(qid: str, qtype: str = "text", required: bool = True, order: int = 0, text: str = "", options=None) -> Question:
    return Question(
        id=qid,
        question_text=text or f"Question {qid}",
        question_type=qtype,
        options=list(options or []),
        is_required=required,
        order_index=order,
    )


@pytest.fixture()
def sample_draft() -> Dict[str, Any]:
    """A valid draft for both save paths."""
    return {
        "title": "  Customer feedback  ",
        "description": "How did we do?",
        "is_active": True,
        "questions": [
            {"id": "temp-1", "question_text": "What did you like?", "question_type": "text",
             "options": [], "is_required": True, "order_index": 0},
            {"id": "temp-2", "question_text": "Rate us", "question_type": "rating",
             "options": [], "is_required": True, "order_index": 1},
            {"id": "temp-3", "question_text": "Where did you hear about us?", "question_type": "multiple_choice",
             "options": ["Friend", " Search ", ""], "is_required": False, "order_index": 2},
        ],
    }


@pytest.fixture()
def created_form(client, owner_headers, sample_draft) -> Dict[str, Any]:
    r = client.post("/forms", json=sample_draft, headers=owner_headers)
    assert r.status_code == 201, r.text
    return r.json()


def question_ids(form: Dict[str, Any]) -> List[str]:
    return [qq["id"] for qq in form["questions"]]
