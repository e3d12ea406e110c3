# ── src/ingestor/errors.py ───────────────────────────────────────────────────
"""
Error taxonomy.

Every failure a caller can see is an `IngestorError` carrying the HTTP status
and the public message. `main.py` registers one exception handler that turns
them into `{"error": <message>}` JSON bodies.

Token verification failures form a separate family (`TokenError`) because the
access gate collapses all of them into a single `AuthInvalid`.
"""


from typing import Optional


class IngestorError(Exception):
    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class AuthMissing(IngestorError):
    status_code = 401
    message = "No token provided"


class AuthInvalid(IngestorError):
    status_code = 401
    message = "Invalid token"


class PermissionDenied(IngestorError):
    status_code = 403
    message = "Permission denied. Only admin users can ingest logs."


class DuplicateUsername(IngestorError):
    status_code = 400
    message = "Username already exists"


class InvalidCredentials(IngestorError):
    status_code = 401
    message = "Invalid username or password"


class PersistenceError(IngestorError):
    status_code = 500
    message = "Internal Server Error"


# ───────────────────────────── token failures ────────────────────────────────

class TokenError(Exception):
    """Base for `verify_token` failures; never surfaces to clients as-is."""


class InvalidSignature(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class MalformedToken(TokenError):
    pass


__all__ = [
    "IngestorError",
    "AuthMissing",
    "AuthInvalid",
    "PermissionDenied",
    "DuplicateUsername",
    "InvalidCredentials",
    "PersistenceError",
    "TokenError",
    "InvalidSignature",
    "TokenExpired",
    "MalformedToken",
]
