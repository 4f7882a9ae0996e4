"""
Exceptions raised by the recommendation core
"""


class RecommendationError(Exception):
    """Base class for recommendation errors"""


class ContextValidationError(RecommendationError, ValueError):
    """
    Caller passed a malformed context or options

    Raised before any scoring work starts. Carries the offending field
    so the HTTP layer can report it.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}
