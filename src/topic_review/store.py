"""SQLite persistence for review sessions.

Each call opens its own connection. ``save`` is a read-modify-write guarded by
the session's ``version`` column: the UPDATE only matches the version the
caller loaded, so a second writer racing on the same session gets
ConcurrentModificationError instead of silently overwriting the first.
"""
import json
import logging
from dataclasses import replace

from topic_review.db import get_connection
from topic_review.errors import ConcurrentModificationError, SessionNotFoundError
from topic_review.models import ReviewSession, RoundSummary
from topic_review.validation import serialize_answer

logger = logging.getLogger(__name__)


def _mastery_flag(value):
    return None if value is None else int(bool(value))


class SessionStore:

    def __init__(self, db_path: str):
        self.db_path = db_path

    def create(self, session: ReviewSession) -> int:
        conn = get_connection(self.db_path)
        cursor = conn.execute(
            """INSERT INTO review_sessions
            (user_id, topic, current_round, remaining, status, mastery_achieved,
             started_at, completed_at, last_activity, version)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0)""",
            (
                session.user_id, session.topic, session.current_round,
                json.dumps(list(session.remaining)), session.status,
                _mastery_flag(session.mastery_achieved), session.started_at,
                session.completed_at, session.last_activity or session.started_at,
            ),
        )
        conn.commit()
        session_id = cursor.lastrowid
        conn.close()
        return session_id

    def load(self, session_id: int) -> ReviewSession | None:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT * FROM review_sessions WHERE id = ?", (session_id,)).fetchone()
        if row is None:
            conn.close()
            return None
        rounds = conn.execute(
            "SELECT * FROM review_rounds WHERE session_id = ? ORDER BY round_number",
            (session_id,),
        ).fetchall()
        conn.close()
        return self._build(row, rounds)

    def save(self, session: ReviewSession, results=()) -> ReviewSession:
        """Overwrite the session's mutable fields and append new rounds.

        ``results`` are the AnswerResult rows of the round just scored; they are
        written to the attempts table in the same transaction. Returns the
        session carrying its new version.
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                """UPDATE review_sessions
                SET current_round = ?, remaining = ?, status = ?, mastery_achieved = ?,
                    completed_at = ?, last_activity = ?, version = version + 1
                WHERE id = ? AND version = ?""",
                (
                    session.current_round, json.dumps(list(session.remaining)),
                    session.status, _mastery_flag(session.mastery_achieved),
                    session.completed_at, session.last_activity,
                    session.id, session.version,
                ),
            )
            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT 1 FROM review_sessions WHERE id = ?", (session.id,)
                ).fetchone()
                if exists is None:
                    raise SessionNotFoundError(session.id)
                logger.warning(
                    "Version conflict saving review session %s (expected version %d)",
                    session.id, session.version,
                )
                raise ConcurrentModificationError(session.id, session.version)

            stored = conn.execute(
                "SELECT COALESCE(MAX(round_number), 0) FROM review_rounds WHERE session_id = ?",
                (session.id,),
            ).fetchone()[0]
            for entry in session.history:
                if entry.round_number <= stored:
                    continue
                conn.execute(
                    """INSERT INTO review_rounds
                    (session_id, round_number, question_ids, incorrect_ids,
                     correct_count, total_count, percentage, submitted_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        session.id, entry.round_number,
                        json.dumps(list(entry.question_ids)), json.dumps(list(entry.incorrect_ids)),
                        entry.correct_count, entry.total_count, entry.percentage,
                        entry.submitted_at,
                    ),
                )
            if results:
                round_number = session.history[-1].round_number
                answered_at = session.history[-1].submitted_at
                conn.executemany(
                    """INSERT INTO review_attempts
                    (session_id, question_id, round_number, selected_answer, is_correct, answered_at)
                    VALUES (?, ?, ?, ?, ?, ?)""",
                    [
                        (
                            session.id, r.question_id, round_number,
                            serialize_answer(r.selected_answer), int(r.is_correct), answered_at,
                        )
                        for r in results
                    ],
                )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return replace(session, version=session.version + 1)

    def list_by_user(self, user_id: str) -> list[ReviewSession]:
        return self._list("WHERE user_id = ?", (user_id,))

    def list_by_user_and_topic(self, user_id: str, topic: str) -> list[ReviewSession]:
        return self._list("WHERE user_id = ? AND topic = ?", (user_id, topic))

    def get_attempts(self, session_id: int, round_number: int | None = None) -> list[dict]:
        conn = get_connection(self.db_path)
        if round_number is None:
            rows = conn.execute(
                "SELECT * FROM review_attempts WHERE session_id = ? ORDER BY round_number, id",
                (session_id,),
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM review_attempts WHERE session_id = ? AND round_number = ? ORDER BY id",
                (session_id, round_number),
            ).fetchall()
        conn.close()
        return [dict(r) for r in rows]

    def _list(self, where: str, params: tuple) -> list[ReviewSession]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            f"SELECT * FROM review_sessions {where} ORDER BY started_at, id", params
        ).fetchall()
        sessions = []
        for row in rows:
            rounds = conn.execute(
                "SELECT * FROM review_rounds WHERE session_id = ? ORDER BY round_number",
                (row["id"],),
            ).fetchall()
            sessions.append(self._build(row, rounds))
        conn.close()
        return sessions

    @staticmethod
    def _build(row, rounds) -> ReviewSession:
        history = tuple(
            RoundSummary(
                round_number=r["round_number"],
                question_ids=tuple(json.loads(r["question_ids"])),
                incorrect_ids=tuple(json.loads(r["incorrect_ids"])),
                correct_count=r["correct_count"],
                total_count=r["total_count"],
                percentage=r["percentage"],
                submitted_at=r["submitted_at"],
            )
            for r in rounds
        )
        mastery = row["mastery_achieved"]
        return ReviewSession(
            id=row["id"],
            user_id=row["user_id"],
            topic=row["topic"],
            started_at=row["started_at"],
            current_round=row["current_round"],
            remaining=tuple(json.loads(row["remaining"])),
            history=history,
            status=row["status"],
            mastery_achieved=None if mastery is None else bool(mastery),
            completed_at=row["completed_at"],
            last_activity=row["last_activity"],
            version=row["version"],
        )
