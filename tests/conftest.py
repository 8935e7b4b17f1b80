from datetime import datetime, timedelta

import pytest

from topic_review.db import init_db
from topic_review.engine import ReviewEngine
from topic_review.questions import QuestionRepository
from topic_review.store import SessionStore


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_review.db")
    return db_path


class StepClock:
    """Returns a time 30 seconds later on every call."""

    def __init__(self, start=datetime(2024, 3, 1, 9, 0, 0), step=timedelta(seconds=30)):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def repo(tmp_db):
    init_db(tmp_db)
    return QuestionRepository(tmp_db)


@pytest.fixture
def make_topic(repo):
    """Add `count` single choice questions (correct answer "A") to a topic."""
    def _make(topic: str, count: int, domain: str = "Java Basics") -> list[int]:
        return [
            repo.add_question(
                domain=domain,
                topic=topic,
                question_text=f"{topic} question {i}",
                options=["right", "wrong", "also wrong", "still wrong"],
                correct_answer="A",
                explanation=f"Explanation {i}",
            )
            for i in range(1, count + 1)
        ]
    return _make


@pytest.fixture
def engine(tmp_db, repo, clock):
    return ReviewEngine(repo, SessionStore(tmp_db), max_rounds=10, clock=clock)
