import pytest
from unittest.mock import patch

from topic_review.app import (
    SessionExitRequested, ask_answer, build_engine, cmd_mastery, cmd_report,
    cmd_review, run_review_round, session_prompt,
)
from topic_review.db import get_connection
from topic_review.settings import set_max_rounds


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("topic_review.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("topic_review.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("topic_review.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_ask_answer_multiple_splits_keys():
    question = {
        "id": 1, "question": "Pick two", "question_type": "multiple", "max_selections": 2,
        "options": [{"key": k, "text": k} for k in "ABCD"],
    }
    with patch("topic_review.app.Prompt.ask", return_value="d, b"):
        assert ask_answer(question) == ["D", "B"]


def test_ask_answer_single_uppercases():
    question = {
        "id": 1, "question": "Pick one", "question_type": "single", "max_selections": 1,
        "options": [{"key": k, "text": k} for k in "ABC"],
    }
    with patch("topic_review.app.Prompt.ask", return_value="c"):
        assert ask_answer(question) == "C"


def test_build_engine_uses_round_cap_setting(tmp_db, repo):
    set_max_rounds(tmp_db, 3)
    assert build_engine(tmp_db).max_rounds == 3


def test_run_review_round_submits_answers(engine, make_topic):
    ids = make_topic("variables", 2)
    round_data = engine.start("alice", "variables")
    with patch("topic_review.app.Prompt.ask", side_effect=["a", "b"]):
        result = run_review_round(engine, round_data)
    assert result.correct_count == 1
    assert result.next_round_question_ids == (ids[1],)


def test_run_review_round_exits_on_q(engine, make_topic):
    """Leaving mid-round submits nothing."""
    make_topic("variables", 2)
    round_data = engine.start("alice", "variables")
    with patch("topic_review.app.Prompt.ask", side_effect=["a", "q"]):
        with pytest.raises(SessionExitRequested):
            run_review_round(engine, round_data)
    session = engine.store.load(round_data["session_id"])
    assert session.history == ()
    assert session.current_round == 1


def test_cmd_review_until_mastery(tmp_db, make_topic):
    make_topic("variables", 2)
    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=["a", "b", "a"]):
        cmd_review(tmp_db, user_id="alice")
    history = build_engine(tmp_db).history("alice", "variables")
    assert len(history) == 1
    assert history[0]["rounds"] == 2
    assert history[0]["mastery_achieved"] is True


def test_cmd_review_exit_keeps_session_open(tmp_db, make_topic):
    make_topic("variables", 2)
    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=["q", "n"]):
        cmd_review(tmp_db, user_id="alice")
    sessions = build_engine(tmp_db).store.list_by_user("alice")
    assert len(sessions) == 1
    assert sessions[0].status == "active"

    # Picking the topic again resumes the same session
    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=["a", "a"]):
        cmd_review(tmp_db, user_id="alice")
    sessions = build_engine(tmp_db).store.list_by_user("alice")
    assert len(sessions) == 1
    assert sessions[0].mastery_achieved is True


def test_cmd_review_exit_and_finish(tmp_db, make_topic):
    make_topic("variables", 2)
    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=["a", "q", "y"]):
        cmd_review(tmp_db, user_id="alice")
    session = build_engine(tmp_db).store.list_by_user("alice")[0]
    assert session.status == "completed"
    assert session.mastery_achieved is False


def test_cmd_mastery_and_report_render(tmp_db, make_topic):
    make_topic("variables", 1)
    cmd_report(tmp_db, user_id="alice")  # no sessions yet, prints a hint
    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=["a"]):
        cmd_review(tmp_db, user_id="alice")
    cmd_mastery(tmp_db, user_id="alice")
    cmd_report(tmp_db, user_id="alice")


def test_cmd_review_resume_finishes_when_questions_are_gone(tmp_db, make_topic):
    ids = make_topic("variables", 3)
    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=["b", "a", "a", "q", "n"]):
        cmd_review(tmp_db, user_id="alice")
    conn = get_connection(tmp_db)
    conn.execute("DELETE FROM questions WHERE id = ?", (ids[0],))
    conn.commit()
    conn.close()

    with patch("topic_review.app.IntPrompt.ask", return_value=1), \
            patch("topic_review.app.Prompt.ask", side_effect=[]):
        cmd_review(tmp_db, user_id="alice")
    session = build_engine(tmp_db).store.list_by_user("alice")[0]
    assert session.status == "completed"
    assert session.mastery_achieved is False
