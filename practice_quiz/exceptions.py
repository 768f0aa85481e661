"""Exceptions raised by the practice quiz core."""


class PracticeQuizError(Exception):
    """Base exception for practice quiz errors."""
    pass


class PersistenceError(PracticeQuizError):
    """Stored progress is unreadable, or could not be written."""
    pass


class QuestionValidationError(PracticeQuizError, ValueError):
    """A question record is inconsistent with its kind."""
    pass
