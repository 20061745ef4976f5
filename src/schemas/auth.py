"""Authentication and user schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from src.models.enums import Gender
from src.schemas.base import CamelModel


class UserRegister(CamelModel):
    """User registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    gender: Gender


class UserLogin(CamelModel):
    """Login request. ``login`` is accepted as an alias of ``email``."""

    email: str | None = Field(None, max_length=255)
    login: str | None = Field(None, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @property
    def identifier(self) -> str | None:
        return self.email or self.login


class Token(CamelModel):
    """JWT token response."""

    token: str


class ResendVerificationRequest(CamelModel):
    email: EmailStr


class UserProfileUpdate(CamelModel):
    """Update profile fields; omitted or empty fields are left unchanged."""

    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    gender: str | None = None


class PasswordChange(CamelModel):
    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class AccountDelete(CamelModel):
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(CamelModel):
    """Public profile of a user."""

    user_id: int = Field(validation_alias="id")
    email: str
    first_name: str
    last_name: str
    gender: str
    avatar_url: str
    created_at: datetime


class AvatarResponse(CamelModel):
    user_id: int = Field(validation_alias="id")
    avatar_url: str
