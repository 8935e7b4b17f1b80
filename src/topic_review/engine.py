"""Multi-round topic review sessions.

A review serves every question of a topic in round 1. After each submitted
round the questions answered incorrectly (or left unanswered) become the next
round; a question answered correctly never comes back. The session completes
with mastery once a round has no misses, or without mastery when the round cap
is reached or the user finishes early.
"""
import logging
from dataclasses import replace
from datetime import datetime

from topic_review.config import DEFAULT_MAX_ROUNDS
from topic_review.errors import (
    EmptyRoundError,
    EmptyTopicError,
    InvalidRoundSubmissionError,
    SessionAlreadyCompletedError,
    SessionCompletedError,
    SessionNotFoundError,
)
from topic_review.models import (
    COMPLETED,
    IN_PROGRESS,
    MASTERED,
    NOT_STARTED,
    AnswerResult,
    MasteryRecord,
    ReviewSession,
    RoundResult,
    RoundSummary,
    SessionSummary,
)
from topic_review.questions import QuestionRepository
from topic_review.scoring import score
from topic_review.store import SessionStore
from topic_review.validation import format_questions, validate

logger = logging.getLogger(__name__)


def time_spent(session: ReviewSession) -> int:
    """Whole seconds between start and completion (or last activity)."""
    end = session.completed_at or session.last_activity
    if not end:
        return 0
    delta = datetime.fromisoformat(end) - datetime.fromisoformat(session.started_at)
    return max(0, int(delta.total_seconds()))


def final_score(session: ReviewSession) -> int:
    return session.history[-1].percentage if session.history else 0


def summarize(session: ReviewSession) -> SessionSummary:
    return SessionSummary(
        session_id=session.id,
        topic=session.topic,
        total_rounds=len(session.history),
        final_score=final_score(session),
        time_spent=time_spent(session),
        mastery_achieved=bool(session.mastery_achieved),
        completed_at=session.completed_at,
    )


class ReviewEngine:
    """Drives review sessions against a question bank and a session store.

    ``max_rounds`` caps how many rounds a session may run; ``None`` removes the
    cap. ``clock`` returns the current datetime and exists for tests.
    """

    def __init__(
        self,
        questions: QuestionRepository,
        store: SessionStore,
        max_rounds: int | None = DEFAULT_MAX_ROUNDS,
        clock=datetime.now,
    ):
        if max_rounds is not None and max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self.questions = questions
        self.store = store
        self.max_rounds = max_rounds
        self.clock = clock

    def _now(self) -> str:
        return self.clock().isoformat()

    def _load(self, session_id) -> ReviewSession:
        session = self.store.load(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _round_payload(self, session: ReviewSession, questions) -> dict:
        return {
            "session_id": session.id,
            "round": session.current_round,
            "total_questions": len(questions),
            "questions": format_questions(questions),
        }

    def start(self, user_id: str, topic: str) -> dict:
        questions = self.questions.get_questions_by_topic(topic)
        if not questions:
            raise EmptyTopicError(topic)
        now = self._now()
        session = ReviewSession(
            id=None,
            user_id=user_id,
            topic=topic,
            started_at=now,
            remaining=tuple(q.id for q in questions),
            last_activity=now,
        )
        session.id = self.store.create(session)
        logger.info(
            "Started review session %s for user %s on %s (%d questions)",
            session.id, user_id, topic, len(questions),
        )
        return self._round_payload(session, questions)

    def submit_round(self, session_id, answers: dict) -> RoundResult:
        """Score the current round and advance or complete the session.

        ``answers`` maps question id to the raw selection: an option key for
        single choice questions, a list/set of keys for multiple choice ones.
        Questions of the round missing from ``answers`` count as incorrect.
        Questions deleted from the bank are dropped from the round; if none
        are left, EmptyRoundError is raised and the session is untouched.
        """
        session = self._load(session_id)
        if session.is_completed:
            raise SessionAlreadyCompletedError(session_id)
        answers = dict(answers or {})
        unknown = set(answers) - set(session.remaining)
        if unknown:
            raise InvalidRoundSubmissionError(session_id, unknown)

        bank = self.questions.get_questions_by_ids(session.remaining)
        results = []
        for question_id in session.remaining:
            question = bank.get(question_id)
            if question is None:
                logger.warning(
                    "Question %s of session %s is no longer in the bank; dropping it",
                    question_id, session_id,
                )
                continue
            selected = answers.get(question_id)
            results.append(AnswerResult(
                question_id=question_id,
                selected_answer=selected,
                correct_answer=question.correct_answer,
                is_correct=validate(selected, question.correct_answer, question.question_type),
                explanation=question.explanation,
            ))

        if not results:
            raise EmptyRoundError(session_id)

        totals = score(results)
        incorrect = tuple(r.question_id for r in results if not r.is_correct)
        now = self._now()
        summary = RoundSummary(
            round_number=session.current_round,
            question_ids=tuple(r.question_id for r in results),
            incorrect_ids=incorrect,
            correct_count=totals["correct"],
            total_count=totals["total"],
            percentage=totals["percentage"],
            submitted_at=now,
        )
        updated = replace(session, history=session.history + (summary,), last_activity=now)

        mastered = not incorrect
        capped = not mastered and self.max_rounds is not None and session.current_round >= self.max_rounds
        if mastered or capped:
            updated = replace(
                updated, status=COMPLETED, remaining=(), mastery_achieved=mastered, completed_at=now,
            )
        else:
            updated = replace(updated, current_round=session.current_round + 1, remaining=incorrect)

        self.store.save(updated, results)

        if mastered:
            logger.info("Session %s mastered in %d rounds", session_id, len(updated.history))
        elif capped:
            logger.info(
                "Session %s reached the %d round cap with %d questions left",
                session_id, self.max_rounds, len(incorrect),
            )
        return RoundResult(
            session_id=session.id,
            round_number=summary.round_number,
            results=results,
            correct_count=summary.correct_count,
            total_count=summary.total_count,
            percentage=summary.percentage,
            is_complete=updated.is_completed,
            mastery_achieved=mastered,
            next_round_question_ids=() if updated.is_completed else incorrect,
        )

    def get_next_round(self, session_id) -> dict:
        session = self._load(session_id)
        if session.is_completed:
            raise SessionCompletedError(session_id)
        bank = self.questions.get_questions_by_ids(session.remaining)
        questions = [bank[qid] for qid in session.remaining if qid in bank]
        if not questions:
            raise EmptyRoundError(session_id)
        return self._round_payload(session, questions)

    def complete(self, session_id) -> SessionSummary:
        """Finish a session. Safe to call again on a completed one."""
        session = self._load(session_id)
        if session.is_completed:
            return summarize(session)
        now = self._now()
        session = replace(
            session, status=COMPLETED, mastery_achieved=False, completed_at=now, last_activity=now,
        )
        session = self.store.save(session)
        logger.info(
            "Session %s finished early after %d rounds", session_id, len(session.history)
        )
        return summarize(session)

    def mastery_overview(self, user_id: str) -> dict:
        records = {
            t["topic"]: MasteryRecord(
                topic=t["topic"], title=t["title"], question_count=t["question_count"],
            )
            for t in self.questions.list_topics()
        }
        rounds_by_topic = {}
        total_time = 0
        for session in self.store.list_by_user(user_id):
            record = records.setdefault(
                session.topic, MasteryRecord(topic=session.topic, title=session.topic),
            )
            record.total_sessions += 1
            spent = time_spent(session)
            record.time_spent += spent
            total_time += spent
            practiced = session.last_activity or session.started_at
            if record.last_practiced is None or practiced > record.last_practiced:
                record.last_practiced = practiced
            if session.is_completed and session.mastery_achieved:
                record.mastery_level = MASTERED
                rounds_by_topic.setdefault(session.topic, []).append(len(session.history))
            elif record.mastery_level == NOT_STARTED:
                record.mastery_level = IN_PROGRESS

        for topic, rounds in rounds_by_topic.items():
            records[topic].average_rounds_to_mastery = round(sum(rounds) / len(rounds), 1)
        all_rounds = [r for rounds in rounds_by_topic.values() for r in rounds]

        mastery = sorted(records.values(), key=lambda r: r.topic)
        levels = [r.mastery_level for r in mastery]
        return {
            "mastery": mastery,
            "overall": {
                "topics_mastered": levels.count(MASTERED),
                "topics_in_progress": levels.count(IN_PROGRESS),
                "topics_not_started": levels.count(NOT_STARTED),
                "average_rounds_to_mastery": (
                    round(sum(all_rounds) / len(all_rounds), 1) if all_rounds else 0.0
                ),
                "total_time_spent": total_time,
            },
        }

    def history(self, user_id: str, topic: str) -> list[dict]:
        sessions = [
            s for s in self.store.list_by_user_and_topic(user_id, topic) if s.is_completed
        ]
        return [
            {
                "session_id": s.id,
                "started_at": s.started_at,
                "completed_at": s.completed_at,
                "rounds": len(s.history),
                "final_score": final_score(s),
                "time_spent": time_spent(s),
                "mastery_achieved": bool(s.mastery_achieved),
            }
            for s in sessions
        ]
