"""Errors raised by the review engine and its collaborators."""


class ReviewError(Exception):
    """Base class for review session errors."""


class EmptyTopicError(ReviewError):
    def __init__(self, topic: str):
        super().__init__(f"No questions available for topic: {topic}")
        self.topic = topic


class SessionNotFoundError(ReviewError):
    def __init__(self, session_id):
        super().__init__(f"Review session not found: {session_id}")
        self.session_id = session_id


class SessionAlreadyCompletedError(ReviewError):
    def __init__(self, session_id):
        super().__init__(f"Review session already completed: {session_id}")
        self.session_id = session_id


# Raised by get_next_round; same condition as a submit on a closed session.
SessionCompletedError = SessionAlreadyCompletedError


class InvalidRoundSubmissionError(ReviewError):
    """An answer references a question that is not part of the current round."""

    def __init__(self, session_id, question_ids):
        self.session_id = session_id
        self.question_ids = sorted(question_ids, key=str)
        super().__init__(
            f"Questions {self.question_ids} are not in the current round of session {session_id}"
        )


class EmptyRoundError(ReviewError):
    """None of the questions left in the session are still in the bank.

    The session stays active; finish it with ``ReviewEngine.complete``.
    """

    def __init__(self, session_id):
        super().__init__(f"No questions of the current round of session {session_id} remain in the bank")
        self.session_id = session_id


class ConcurrentModificationError(ReviewError):
    """The stored session changed since it was loaded. Safe to retry."""

    def __init__(self, session_id, expected_version: int):
        super().__init__(
            f"Review session {session_id} was modified concurrently (expected version {expected_version})"
        )
        self.session_id = session_id
        self.expected_version = expected_version


class NoReviewHistoryError(ReviewError):
    def __init__(self, user_id: str):
        super().__init__(f"No review sessions found for user: {user_id}")
        self.user_id = user_id
