"""Error taxonomy shared by services, the auth gate and the HTTP layer.

Every error carries the HTTP status it maps to and a message that is safe to
show to the client. Anything more detailed belongs in the server log.
"""

from typing import Dict, Optional


class TaskTrackError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(TaskTrackError):
    """Malformed or out-of-range input, reported per field."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: Dict[str, str]):
        super().__init__()
        self.errors = errors


class Unauthenticated(TaskTrackError):
    # never says why; the reason is only logged
    status_code = 401
    message = "Not authenticated"


class InvalidCredentials(TaskTrackError):
    status_code = 401
    message = "Invalid credentials"


class NotFound(TaskTrackError):
    """Absent, or present but owned by someone else. Callers cannot tell which."""

    status_code = 404
    message = "Not found"


class Conflict(TaskTrackError):
    status_code = 409
    message = "Resource already exists"


class StoreUnavailable(TaskTrackError):
    status_code = 500
    message = "Storage temporarily unavailable"


class HashingError(TaskTrackError):
    status_code = 500
    message = "Could not process credentials"


class TokenError(Exception):
    """Base class for token verification failures. Never shown to clients."""

    reason = "invalid"


class MalformedToken(TokenError):
    reason = "malformed"


class BadSignature(TokenError):
    reason = "bad_signature"


class TokenExpired(TokenError):
    reason = "expired"
