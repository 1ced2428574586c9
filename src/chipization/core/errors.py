"""Error taxonomy raised by the core engines.

The HTTP layer maps these onto status codes; the engines themselves never
know about HTTP.
"""

from typing import Any, Dict, Optional


class ChipizationError(Exception):
    """Base exception for rejected core operations."""

    title = "Request Failed"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class NotFoundError(ChipizationError):
    """A referenced entity does not exist, or a relation between two entities does not hold."""

    title = "Not Found"


class ConflictError(ChipizationError):
    """The operation would violate a standing invariant."""

    title = "Conflict"


class ValidationFailure(ChipizationError):
    """Malformed input reached the core despite upstream checks."""

    title = "Validation Failure"
