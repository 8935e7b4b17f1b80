"""Per-user review report over completed sessions."""
from datetime import datetime, timedelta

from topic_review.errors import NoReviewHistoryError
from topic_review.store import SessionStore


def categorize_difficulty(rounds: int) -> str:
    if rounds <= 1:
        return "mastered"
    elif rounds == 2:
        return "good"
    elif rounds == 3:
        return "needs_work"
    return "struggling"


def _minutes(session) -> int | None:
    if not session.started_at or not session.completed_at:
        return None
    delta = datetime.fromisoformat(session.completed_at) - datetime.fromisoformat(session.started_at)
    return round(delta.total_seconds() / 60)


def _topic_metrics(sessions) -> list[dict]:
    metrics = []
    for s in sessions:
        last = s.history[-1] if s.history else None
        rounds = len(s.history)
        metrics.append({
            "session_id": s.id,
            "topic": s.topic,
            "rounds_to_complete": rounds,
            "final_accuracy": last.percentage if last else 0,
            # Unmastered reviews count as struggling however short they were.
            "difficulty": categorize_difficulty(rounds) if s.mastery_achieved else "struggling",
            "mastery_achieved": bool(s.mastery_achieved),
            "completed_at": s.completed_at,
        })
    return metrics


def _time_analysis(sessions, now: datetime) -> dict:
    durations = [m for m in (_minutes(s) for s in sessions) if m is not None]
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    completed = [datetime.fromisoformat(s.completed_at) for s in sessions if s.completed_at]
    return {
        "average_session_minutes": round(sum(durations) / len(durations)) if durations else 0,
        "total_study_minutes": sum(durations),
        "sessions_last_7_days": sum(1 for c in completed if c > week_ago),
        "sessions_last_30_days": sum(1 for c in completed if c > month_ago),
    }


def _recommendations(topics: list[dict]) -> list[dict]:
    groups = [
        ("struggling", "focus_on_struggling", "Focus on topics that required multiple rounds"),
        ("needs_work", "review_needs_work", "Consider reviewing these topics to strengthen understanding"),
        ("mastered", "maintain_mastery", "Great job! Keep practicing these mastered topics occasionally"),
    ]
    recommendations = []
    for difficulty, kind, message in groups:
        matching = sorted({t["topic"] for t in topics if t["difficulty"] == difficulty})
        if matching:
            recommendations.append({"type": kind, "message": message, "topics": matching})
    return recommendations


def generate_user_report(store: SessionStore, user_id: str, now: datetime = None) -> dict:
    """Summarize a user's completed reviews: difficulty, time and advice.

    Raises NoReviewHistoryError if the user never started a review.
    """
    now = now or datetime.now()
    sessions = store.list_by_user(user_id)
    if not sessions:
        raise NoReviewHistoryError(user_id)
    completed = sorted(
        (s for s in sessions if s.is_completed),
        key=lambda s: s.completed_at or "",
        reverse=True,
    )
    topics = _topic_metrics(completed)
    breakdown = {"mastered": 0, "good": 0, "needs_work": 0, "struggling": 0}
    for t in topics:
        breakdown[t["difficulty"]] += 1
    return {
        "user_id": user_id,
        "total_sessions": len(completed),
        "topics": topics,
        "recommendations": _recommendations(topics),
        "time_analysis": _time_analysis(completed, now),
        "difficulty_breakdown": breakdown,
    }
