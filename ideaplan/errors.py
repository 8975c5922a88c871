"""
Error taxonomy for ideaplan.

Every public operation either returns a fully valid record or raises one of
these. The CLI maps them to exit codes (see lib/constants.py).
"""

from typing import Optional


class PlannerError(Exception):
    """Base class for all ideaplan errors."""

    code = "INTERNAL_ERROR"
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }


class ValidationError(PlannerError):
    """Caller supplied input of the wrong shape or size."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        return data


class NotFoundError(PlannerError):
    """Unknown idea, session or task."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class GenerationError(PlannerError):
    """Content generator failed or returned a malformed payload."""

    code = "GENERATION_ERROR"
    retryable = True

    def __init__(self, stage: str, message: str, details: Optional[dict] = None):
        self.stage = stage
        self.details = details or {}
        super().__init__(f"[{stage}] {message}")


class ConflictError(PlannerError):
    """Another mutation for the same key is in flight and did not finish in time."""

    code = "CONFLICT"
    retryable = True
