"""
Application Error Taxonomy

Every failure a service can report maps to one of these exceptions.
The API layer turns them into the JSON envelope used by all routes:

    {"success": false, "message": "..."}

with the HTTP status carried by the exception class.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that are safe to report to the client."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.status_code}: {self.message}>"


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(AppError):
    """Missing credentials, bad credentials, or a malformed token."""
    status_code = 401
    default_message = "Access denied"


class Forbidden(AppError):
    """Token rejected (bad signature / expired) or insufficient role."""
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    """Resource absent, or not owned by the caller."""
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    """Duplicate value for a unique field."""
    # Registration conflicts have always been reported as 400
    status_code = 400
    default_message = "Already exists"


class InternalError(AppError):
    """Storage or unexpected failure. Details stay in the server log."""
    status_code = 500
    default_message = "Internal server error"
