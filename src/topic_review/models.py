"""Data classes for the review domain model."""
from dataclasses import dataclass
from typing import Optional, Union

SINGLE = "single"
MULTIPLE = "multiple"

ACTIVE = "active"
COMPLETED = "completed"

NOT_STARTED = "not-started"
IN_PROGRESS = "in-progress"
MASTERED = "mastered"

OPTION_KEYS = ("A", "B", "C", "D", "E")


@dataclass(frozen=True)
class Question:
    id: int
    domain: str
    topic: str
    question_text: str
    option_a: str
    option_b: str
    option_c: str
    correct_answer: str
    option_d: Optional[str] = None
    option_e: Optional[str] = None
    question_type: str = SINGLE
    explanation: str = ""

    @property
    def options(self) -> list[tuple[str, str]]:
        """(key, text) pairs for every option present."""
        texts = (self.option_a, self.option_b, self.option_c, self.option_d, self.option_e)
        return [(key, text) for key, text in zip(OPTION_KEYS, texts) if text]


@dataclass(frozen=True)
class SingleAnswer:
    key: str


@dataclass(frozen=True)
class MultipleAnswer:
    keys: frozenset


Answer = Union[SingleAnswer, MultipleAnswer]


@dataclass(frozen=True)
class AnswerResult:
    question_id: int
    selected_answer: object
    correct_answer: str
    is_correct: bool
    explanation: str = ""


@dataclass(frozen=True)
class RoundSummary:
    round_number: int
    question_ids: tuple
    incorrect_ids: tuple
    correct_count: int
    total_count: int
    percentage: int
    submitted_at: str


@dataclass(frozen=True)
class RoundResult:
    session_id: int
    round_number: int
    results: list
    correct_count: int
    total_count: int
    percentage: int
    is_complete: bool
    mastery_achieved: bool = False
    next_round_question_ids: tuple = ()


@dataclass
class ReviewSession:
    id: Optional[int]
    user_id: str
    topic: str
    started_at: str
    current_round: int = 1
    remaining: tuple = ()
    history: tuple = ()  # RoundSummary entries, append-only
    status: str = ACTIVE
    mastery_achieved: Optional[bool] = None
    completed_at: Optional[str] = None
    last_activity: Optional[str] = None
    version: int = 0

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED


@dataclass(frozen=True)
class SessionSummary:
    session_id: int
    topic: str
    total_rounds: int
    final_score: int
    time_spent: int  # seconds
    mastery_achieved: bool
    completed_at: Optional[str] = None


@dataclass
class MasteryRecord:
    topic: str
    mastery_level: str = NOT_STARTED
    total_sessions: int = 0
    average_rounds_to_mastery: Optional[float] = None
    last_practiced: Optional[str] = None
    time_spent: int = 0
    question_count: int = 0
    title: str = ""
