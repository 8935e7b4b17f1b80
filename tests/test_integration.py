# tests/test_integration.py
"""End-to-end test of the core workflow."""
from topic_review.db import init_db
from topic_review.engine import ReviewEngine
from topic_review.questions import QuestionRepository
from topic_review.report import generate_user_report
from topic_review.seed import seed_all
from topic_review.settings import get_max_rounds
from topic_review.store import SessionStore


def test_full_review_workflow(tmp_db):
    """Review a seeded topic to mastery and check every read model."""
    # Setup
    init_db(tmp_db)
    seed_all(tmp_db)
    questions = QuestionRepository(tmp_db)
    engine = ReviewEngine(questions, SessionStore(tmp_db), max_rounds=get_max_rounds(tmp_db))

    started = engine.start("alice", "operators")
    assert started["total_questions"] == 3
    bank = questions.get_questions_by_ids([q["id"] for q in started["questions"]])

    # Round 1: answer the multi-select question with a single key
    answers = {}
    for qid, q in bank.items():
        if q.question_type == "multiple":
            answers[qid] = [sorted(q.correct_answer.split(","))[0]]
        else:
            answers[qid] = q.correct_answer
    first = engine.submit_round(started["session_id"], answers)
    assert first.correct_count == 2
    assert len(first.next_round_question_ids) == 1

    # Round 2: full answer
    next_round = engine.get_next_round(started["session_id"])
    assert next_round["round"] == 2
    multi = next_round["questions"][0]
    assert multi["question_type"] == "multiple"
    assert multi["max_selections"] == 2
    correct = bank[multi["id"]].correct_answer.split(",")
    second = engine.submit_round(started["session_id"], {multi["id"]: list(reversed(correct))})
    assert second.is_complete

    summary = engine.complete(started["session_id"])
    assert summary.mastery_achieved
    assert summary.total_rounds == 2

    overview = engine.mastery_overview("alice")
    assert overview["overall"]["topics_mastered"] == 1
    assert overview["overall"]["topics_not_started"] == 2

    assert len(engine.history("alice", "operators")) == 1

    report = generate_user_report(engine.store, "alice")
    assert report["difficulty_breakdown"]["good"] == 1
