"""Authentication schemas (DTOs)."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.features.user.schemas import UserResponse
from src.shared.validators.name import validate_display_name
from src.shared.validators.password import validate_password_strength


# Request schemas
class RegisterRequest(BaseModel):
    """Registration request.

    Note: Uses email-validator library via Pydantic's EmailStr for RFC 5322 compliant email validation.
    """

    email: EmailStr
    password: str = Field(..., description="Password (minimum 6 characters)")
    name: str = Field(..., description="Display name (2-50 characters)")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        """Validate password using shared validator."""
        return validate_password_strength(value)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return validate_display_name(value)


class LoginRequest(BaseModel):
    """Login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


# Response schemas
class AuthResponse(BaseModel):
    """Issued access token plus the authenticated user.

    The refresh token is never part of the body; it travels in an HTTP-only cookie.
    """

    message: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
