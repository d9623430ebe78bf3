"""Domain errors raised by the goal, schedule and review services."""
from typing import Optional


class MomentumError(Exception):
    """Base class for errors that are reported back to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MomentumError):
    """Row is absent or not owned by the caller."""

    status_code = 404


class ValidationError(MomentumError):
    """Input rejected before touching storage (empty title, bad status...)."""

    status_code = 400


class ForbiddenError(MomentumError):
    """Ownership violation where it must be told apart from NotFound."""

    status_code = 403


class PersistenceFailure(MomentumError):
    """Storage collaborator error; partial writes have been rolled back."""

    status_code = 500


class ContentGenerationError(MomentumError):
    """The content generator could not be reached or timed out."""

    status_code = 502


class GenerationEmpty(ContentGenerationError):
    """The generator answered but produced nothing usable."""


class GenerationParseError(ContentGenerationError):
    """The generator output could not be extracted or parsed."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text
