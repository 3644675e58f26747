"""Application exception hierarchy.

Every error the API reports deliberately derives from ``AttendanceAPIError``
and carries the HTTP status it maps to. The app-level error handler renders
them; anything else is an unexpected fault.
"""
from typing import List, Optional


class AttendanceAPIError(Exception):
    """Base class for errors reported to API clients."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            'error': True,
            'message': self.message,
            'status_code': self.status_code
        }


class ValidationError(AttendanceAPIError):
    """Malformed body, headers or coordinates. Client fixable."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: str = None, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.errors:
            result['errors'] = self.errors
        return result


class GateRejection(AttendanceAPIError):
    """Network, location or spoofing policy failure."""

    status_code = 403
    default_message = "Access denied"

    def __init__(self, message: str = None, status_code: int = None, gate: str = None):
        super().__init__(message, status_code)
        self.gate = gate


class StateConflict(AttendanceAPIError):
    """Business rule conflict on existing state."""

    status_code = 409
    default_message = "Request conflicts with current state"


class AlreadyCheckedIn(StateConflict):
    default_message = "Already checked in today"


class AlreadyCheckedOut(StateConflict):
    default_message = "Already checked out today"


class NoCheckInFound(StateConflict):
    default_message = "No check in record found for today"


class DuplicateEmail(StateConflict):
    default_message = "Email already registered"


class NotFoundOrInactive(AttendanceAPIError):
    """Authenticated identity does not resolve to an active user."""

    status_code = 401
    default_message = "User not found or inactive"


class InvalidCredentials(AttendanceAPIError):
    status_code = 401
    default_message = "Invalid email or password"


class PersistenceFailure(AttendanceAPIError):
    """Store unreachable or write failed. Detail is logged, never returned."""

    status_code = 503
    default_message = "Service temporarily unavailable"
