"""
Error taxonomy shared by services and routes
"""

from typing import Any, Optional


class ReservationError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 400
    error_code = "reservation_error"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ReservationError):
    """Missing or malformed input"""

    status_code = 400
    error_code = "validation_error"


class NotFoundError(ReservationError):
    status_code = 404
    error_code = "not_found"


class ReservationConflictError(ReservationError):
    """Table already booked, or a uniqueness rule was violated"""

    status_code = 409
    error_code = "conflict"


class InfrastructureError(ReservationError):
    """Persistence failure; the message shown to clients stays generic"""

    status_code = 500
    error_code = "infrastructure_error"
