"""Exception types reported by the service and migration layers."""

from typing import Optional


class PaperShelfError(Exception):
    """Base class for papershelf errors."""


class ValidationError(PaperShelfError):
    """Submission rejected before anything was written.

    ``classification`` carries the normalized classification so the
    caller can re-render the form with what was understood.
    """

    def __init__(self, message: str, classification: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.classification = classification or {}


class NotFoundError(PaperShelfError):
    """No paper with the given id."""

    def __init__(self, paper_id: int):
        super().__init__(f"Paper {paper_id} not found")
        self.paper_id = paper_id


class MigrationFailure(PaperShelfError):
    """A migration step failed and was rolled back."""

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"Migration failed during {step}: {cause}")
        self.step = step
        self.cause = cause
