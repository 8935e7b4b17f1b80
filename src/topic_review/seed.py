"""Seed the database with the bundled sample question bank."""
import json
from pathlib import Path

from topic_review.db import get_connection
from topic_review.questions import QuestionRepository

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database already holds any questions."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM questions").fetchone()[0]
    conn.close()
    return count > 0


def seed_questions(db_path: str, path: str | Path | None = None) -> int:
    """Insert questions from a JSON file (defaults to content/questions.json).

    An optional "topics" list in the file fills the topic catalog.
    """
    path = Path(path) if path else CONTENT_DIR / "questions.json"
    data = json.loads(path.read_text())
    repo = QuestionRepository(db_path)
    for t in data.get("topics", []):
        repo.add_topic(t["topic"], t["title"], t.get("description", ""))
    for q in data["questions"]:
        repo.add_question(
            domain=q["domain"],
            topic=q["topic"],
            question_text=q["question_text"],
            options=q["options"],
            correct_answer=q["correct_answer"],
            question_type=q.get("question_type", "single"),
            explanation=q.get("explanation", ""),
        )
    return len(data["questions"])


def seed_all(db_path: str) -> None:
    if is_seeded(db_path):
        return
    seed_questions(db_path)
