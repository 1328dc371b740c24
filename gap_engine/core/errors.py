"""Error taxonomy for analysis runs.

Three failure domains are kept apart so callers can tell them apart:

- precondition errors: the answers cannot be scored at all (fatal)
- generation errors: the text generator failed (recovered with fallback text)
- persistence errors: the stores failed (reported, computed results survive)
"""


class GapEngineError(Exception):
    """Base class for all Gap Engine errors."""


class ConfigurationError(GapEngineError):
    """Raised when a collaborator is initialized without required settings."""


class AnswerPreconditionError(GapEngineError):
    """Raised when an answer set cannot be scored."""


class IncompleteSubmissionError(AnswerPreconditionError):
    """Raised when an answer set lacks one or more catalog question ids."""

    def __init__(self, role: str, missing_ids: list[str]):
        self.role = role
        self.missing_ids = missing_ids
        super().__init__(
            f"Incomplete submission for {role}: missing answers for {', '.join(missing_ids)}"
        )


class InvalidAnswerError(AnswerPreconditionError):
    """Raised when an answer is not an integer score in [1, 5]."""

    def __init__(self, role: str, question_id: str, value: object):
        self.role = role
        self.question_id = question_id
        super().__init__(
            f"Invalid answer for {role} on {question_id}: expected an integer 1-5, "
            f"got {type(value).__name__}"
        )


class GenerationError(GapEngineError):
    """Raised when the text generator fails, times out or returns nothing."""


class PersistenceError(GapEngineError):
    """Raised when the room or answer store fails."""


class AnalysisTimeoutError(GapEngineError):
    """Raised when an analysis run exceeds its wall-clock budget."""
