"""User-related exceptions."""

from fastapi import status

from src.features.auth.exceptions import AppException, ErrorKind


class UserException(AppException):
    """Base user exception."""

    kind = ErrorKind.BAD_REQUEST

    def __init__(self, detail: str = "User operation failed", status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(detail=detail, status_code=status_code)


class UserNotFound(UserException):
    """Raised when user is not found."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self):
        super().__init__(detail="User not found", status_code=status.HTTP_404_NOT_FOUND)


class EmailAlreadyExists(UserException):
    """Raised when an email is already registered to another account."""

    kind = ErrorKind.CONFLICT

    def __init__(self):
        super().__init__(detail="User with this email already exists", status_code=status.HTTP_409_CONFLICT)


class IncorrectPassword(UserException):
    """Raised when a password confirmation does not match."""

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, detail: str = "Current password is incorrect"):
        super().__init__(detail=detail, status_code=status.HTTP_401_UNAUTHORIZED)


class PasswordUnchanged(UserException):
    """Raised when the new password equals the current one."""

    def __init__(self):
        super().__init__(detail="New password must be different from current password")
