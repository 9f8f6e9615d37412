import os
import tempfile
from datetime import date

import pytest

# Must be set before db.py is imported anywhere
_TMP = tempfile.mkdtemp(prefix="daily-trivia-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP}/test.db")
os.environ.setdefault("USER_STORE", "sql")

from fastapi.testclient import TestClient  # noqa: E402

from bank import Question, QuestionCatalog  # noqa: E402
from daykey import FixedClock  # noqa: E402
from db import SessionLocal, init_db  # noqa: E402
from deps.services import get_clock  # noqa: E402
from main import app  # noqa: E402
from models import UserRow  # noqa: E402
from processor import AnswerProcessor, UserLocks  # noqa: E402
from store import JsonFileUserStore, SqlUserStore  # noqa: E402

init_db()

DAY = date(2026, 10, 18)


def _make_question(qid: int, correct: int = 0) -> Question:
    return Question(
        id=qid,
        question=f"Question {qid}?",
        options=["a", "b", "c", "d"],
        correct=correct,
        category="Test",
        funFact=f"Fact {qid}",
    )


@pytest.fixture
def make_question():
    return _make_question


@pytest.fixture
def catalog():
    # every question's answer is option 2, so tests don't care which one is picked
    return QuestionCatalog(_make_question(i, correct=2) for i in range(1, 8))


@pytest.fixture
def clock():
    return FixedClock(DAY)


@pytest.fixture
def json_store(tmp_path):
    return JsonFileUserStore(tmp_path / "users.json")


@pytest.fixture
def sql_store():
    with SessionLocal() as db:
        db.query(UserRow).delete()
        db.commit()
    return SqlUserStore()


@pytest.fixture
def processor(json_store, catalog, clock):
    return AnswerProcessor(json_store, catalog, clock, locks=UserLocks())


@pytest.fixture
def client(clock):
    with SessionLocal() as db:
        db.query(UserRow).delete()
        db.commit()
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
