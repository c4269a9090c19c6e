"""
Exception hierarchy for the survey engine.

Nothing here is fatal to the process: every error is either a rejected
action (state unchanged) or a degraded-but-available state.
"""


class SurveyEngineError(Exception):
    """Base class for all survey engine errors."""
    pass


class ValidationError(SurveyEngineError, ValueError):
    """
    Raised when an action is rejected before it touches any state.

    ``field`` names the offending input (``title``, ``options``, a question id).
    """

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class MissingRequiredAnswers(ValidationError):
    """Raised when a submission leaves required questions unanswered."""

    def __init__(self, question_titles):
        self.question_titles = list(question_titles)
        super().__init__(
            "Please answer all required questions: " + ", ".join(self.question_titles),
            field="answers",
        )


class NotFoundError(SurveyEngineError, LookupError):
    """Raised for unknown ids, but only when strict lookups are enabled."""
    pass


class SurveyNotFound(NotFoundError):
    pass


class QuestionNotFound(NotFoundError):
    pass


class NoOpenSurvey(NotFoundError):
    pass


class RecordFormatError(SurveyEngineError, ValueError):
    """Raised when a persisted record cannot be turned back into a model object."""
    pass


class PermissionDenied(SurveyEngineError):
    """Raised by require_permission when the capability check says no."""

    def __init__(self, permission: str):
        super().__init__(f"Missing permission: {permission}")
        self.permission = permission
