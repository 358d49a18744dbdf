"""Authentication exceptions.

Every exception carries an ``ErrorKind`` so handlers and tests can tell
outcomes apart without parsing messages, and a ``clear_refresh_cookie`` flag
telling the HTTP layer to drop the client's refresh credential.
"""

from enum import StrEnum

from fastapi import HTTPException, status


class ErrorKind(StrEnum):
    """Externally observable failure categories."""

    INVALID_CREDENTIALS = "invalid_credentials"
    CONFLICT = "conflict"
    UNAUTHENTICATED = "unauthenticated"
    SESSION_EXPIRED = "session_expired"
    SECURITY_VIOLATION = "security_violation"
    NOT_FOUND = "not_found"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    BAD_REQUEST = "bad_request"
    INTERNAL = "internal"


class AppException(HTTPException):
    """Base for every error the service raises on purpose."""

    kind: ErrorKind = ErrorKind.INTERNAL
    clear_refresh_cookie: bool = False

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class AuthenticationException(AppException):
    """Base authentication exception."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsException(AuthenticationException):
    """Raised when the email is unknown or the password is wrong."""

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self):
        super().__init__(detail="Invalid credentials")


# Token codec failures


class InvalidTokenException(AuthenticationException):
    """Raised when a token has a bad signature, is malformed or is of the wrong kind."""

    kind = ErrorKind.INVALID_TOKEN

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail=detail)


class TokenExpiredException(InvalidTokenException):
    """Raised when a token's ``exp`` claim is in the past."""

    kind = ErrorKind.EXPIRED_TOKEN

    def __init__(self):
        super().__init__(detail="Token has expired")


# Refresh protocol outcomes


class RefreshTokenMissingException(AuthenticationException):
    """Raised when /refresh is called without the refresh cookie."""

    clear_refresh_cookie = True

    def __init__(self):
        super().__init__(detail="No refresh token provided")


class RefreshTokenInvalidException(AuthenticationException):
    """Raised when the refresh token fails verification or its user is gone."""

    clear_refresh_cookie = True

    def __init__(self, detail: str = "Invalid refresh token"):
        super().__init__(detail=detail)


class SessionExpiredException(RefreshTokenInvalidException):
    """Raised when the refresh token has outlived the absolute session lifetime."""

    kind = ErrorKind.SESSION_EXPIRED

    def __init__(self):
        super().__init__(detail="Session expired. Please log in again.")


class SecurityViolationException(AppException):
    """Raised when a consumed refresh token is presented again.

    All of the user's sessions have been revoked by the time this is raised.
    """

    kind = ErrorKind.SECURITY_VIOLATION
    clear_refresh_cookie = True

    def __init__(self):
        super().__init__(
            detail="Security check failed. Please log in again.",
            status_code=status.HTTP_403_FORBIDDEN,
        )
