"""Read access to the question bank."""
from topic_review.db import get_connection
from topic_review.models import MULTIPLE, SINGLE, Question


def _row_to_question(row) -> Question:
    return Question(
        id=row["id"],
        domain=row["domain"],
        topic=row["topic"],
        question_text=row["question_text"],
        option_a=row["option_a"],
        option_b=row["option_b"],
        option_c=row["option_c"],
        option_d=row["option_d"],
        option_e=row["option_e"],
        correct_answer=row["correct_answer"],
        question_type=row["question_type"] or SINGLE,
        explanation=row["explanation"] or "",
    )


class QuestionRepository:
    """Questions grouped by topic. Read-only as far as review sessions go."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_questions_by_topic(self, topic: str) -> list[Question]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            "SELECT * FROM questions WHERE topic = ? ORDER BY id", (topic,)
        ).fetchall()
        conn.close()
        return [_row_to_question(r) for r in rows]

    def get_question_by_id(self, question_id: int) -> Question | None:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
        conn.close()
        return _row_to_question(row) if row else None

    def get_questions_by_ids(self, question_ids) -> dict[int, Question]:
        question_ids = list(question_ids)
        if not question_ids:
            return {}
        placeholders = ",".join("?" for _ in question_ids)
        conn = get_connection(self.db_path)
        rows = conn.execute(
            f"SELECT * FROM questions WHERE id IN ({placeholders})", question_ids
        ).fetchall()
        conn.close()
        return {r["id"]: _row_to_question(r) for r in rows}

    def list_topics(self) -> list[dict]:
        """All topics with their question counts, alphabetically.

        A topic without a catalog entry is titled by its own name.
        """
        conn = get_connection(self.db_path)
        rows = conn.execute(
            """SELECT q.topic, q.domain, t.title, COUNT(*) as question_count
            FROM questions q
            LEFT JOIN topics t ON t.topic = q.topic
            GROUP BY q.topic
            ORDER BY q.topic"""
        ).fetchall()
        conn.close()
        return [
            {
                "topic": r["topic"],
                "title": r["title"] or r["topic"],
                "domain": r["domain"],
                "question_count": r["question_count"],
            }
            for r in rows
        ]

    def add_topic(self, topic: str, title: str, description: str = "") -> None:
        """Add a topic to the catalog, or retitle an existing one."""
        conn = get_connection(self.db_path)
        conn.execute(
            """INSERT INTO topics (topic, title, description) VALUES (?, ?, ?)
            ON CONFLICT(topic) DO UPDATE SET title = excluded.title,
            description = excluded.description""",
            (topic, title, description),
        )
        conn.commit()
        conn.close()

    def add_question(
        self,
        domain: str,
        topic: str,
        question_text: str,
        options: list[str],
        correct_answer: str,
        question_type: str = SINGLE,
        explanation: str = "",
    ) -> int:
        if not 3 <= len(options) <= 5:
            raise ValueError("A question needs between 3 and 5 options")
        if question_type not in (SINGLE, MULTIPLE):
            raise ValueError(f"Unknown question type: {question_type}")
        padded = list(options) + [None] * (5 - len(options))
        conn = get_connection(self.db_path)
        cursor = conn.execute(
            """INSERT INTO questions
            (domain, topic, question_text, option_a, option_b, option_c, option_d, option_e,
             correct_answer, question_type, explanation)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (domain, topic, question_text, *padded, correct_answer, question_type, explanation),
        )
        conn.commit()
        question_id = cursor.lastrowid
        conn.close()
        return question_id
