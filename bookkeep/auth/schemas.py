"""Authentication request/response schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

USERNAME_MAX_LENGTH = 50
PASSWORD_MAX_LENGTH = 128  # Reasonable max to keep bcrypt work bounded


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively."""
    return email.strip().lower()


# =============================================================================
# Request Models
# =============================================================================


class RegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LENGTH)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


# =============================================================================
# Response Models
# =============================================================================


class UserSummary(BaseModel):
    """Public view of a user. Never carries the password hash."""

    id: str
    username: str
    email: str


class LoginResponse(BaseModel):
    """Authentication token response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the token expires
    user: UserSummary


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
