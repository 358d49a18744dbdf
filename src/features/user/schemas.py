"""User schemas (DTOs)."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from src.shared.validators.name import validate_display_name
from src.shared.validators.password import validate_password_strength


# Request schemas
class ProfileUpdateRequest(BaseModel):
    """Profile update request; at least one field is required."""

    name: str | None = None
    email: EmailStr | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str | None) -> str | None:
        return validate_display_name(value) if value is not None else None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return value.lower() if value is not None else None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "ProfileUpdateRequest":
        if self.name is None and self.email is None:
            raise ValueError("At least one field (name or email) must be provided")
        return self


class PasswordChangeRequest(BaseModel):
    """Password change request."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., description="Password must be at least 6 characters")

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value):
        """Validate password using shared validator."""
        return validate_password_strength(value)


class AccountDeleteRequest(BaseModel):
    """Account deletion requires the current password."""

    password: str = Field(..., min_length=1)


# Response schemas
class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash."""

    id: int
    email: EmailStr
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    message: str | None = None
    user: UserResponse
