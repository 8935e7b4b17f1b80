"""Answer validation for single and multiple choice questions."""
from topic_review.models import MULTIPLE, SINGLE, MultipleAnswer, Question, SingleAnswer

_SET_TYPES = (list, tuple, set, frozenset)


def parse_correct_spec(correct_spec: str) -> frozenset:
    """Split a comma-separated correct answer ("B,C") into a key set."""
    return frozenset(part.strip() for part in correct_spec.split(",") if part.strip())


def parse_answer(raw, question_type: str):
    """Resolve a raw submission into a SingleAnswer or MultipleAnswer.

    Returns None for anything that can't be a valid answer to a question of
    this type: empty input, a bare string for a multiple choice question, a
    collection for a single choice one, non-string keys, duplicate keys.
    """
    if isinstance(raw, (SingleAnswer, MultipleAnswer)):
        expected = SingleAnswer if question_type == SINGLE else MultipleAnswer
        return raw if isinstance(raw, expected) else None
    if raw is None:
        return None
    if question_type == SINGLE:
        if not isinstance(raw, str) or raw == "":
            return None
        return SingleAnswer(raw)
    if question_type == MULTIPLE:
        if not isinstance(raw, _SET_TYPES):
            return None
        keys = list(raw)
        if not keys or not all(isinstance(k, str) and k for k in keys):
            return None
        if len(set(keys)) != len(keys):
            return None
        return MultipleAnswer(frozenset(keys))
    return None


def validate(selected, correct_spec, question_type: str) -> bool:
    """Check a submitted answer against the question's correct answer.

    Never raises: malformed input of any kind is simply an incorrect answer.
    """
    if not isinstance(correct_spec, str) or not correct_spec:
        return False
    answer = parse_answer(selected, question_type)
    if answer is None:
        return False
    if isinstance(answer, SingleAnswer):
        return answer.key == correct_spec
    correct = parse_correct_spec(correct_spec)
    return len(answer.keys) == len(correct) and answer.keys == correct


def format_question(question: Question) -> dict:
    """Question as served to a client: options only, no correct answer."""
    if question.question_type == MULTIPLE:
        max_selections = len(parse_correct_spec(question.correct_answer)) or 2
    else:
        max_selections = 1
    return {
        "id": question.id,
        "question": question.question_text,
        "options": [{"key": key, "text": text} for key, text in question.options],
        "question_type": question.question_type,
        "max_selections": max_selections,
    }


def format_questions(questions: list[Question]) -> list[dict]:
    return [format_question(q) for q in questions]


def serialize_answer(raw) -> str | None:
    """Text form of a submission for the attempts table."""
    if raw is None:
        return None
    if isinstance(raw, SingleAnswer):
        return raw.key
    if isinstance(raw, MultipleAnswer):
        return ",".join(sorted(raw.keys))
    if isinstance(raw, str):
        return raw
    if isinstance(raw, _SET_TYPES):
        return ",".join(sorted(str(k) for k in raw))
    return str(raw)
