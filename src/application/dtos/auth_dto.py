from __future__ import annotations

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from src.application.dtos.common_dto import required
from src.domain.entities.user import UserEntity

INVALID_EMAIL = "Please include a valid email"


def _normalize_email(value: str | None) -> str:
    if not value or not value.strip():
        raise PydanticCustomError("value_error", INVALID_EMAIL)
    try:
        return validate_email(value.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise PydanticCustomError("value_error", INVALID_EMAIL) from None


class LoginRequest(BaseModel):
    """Credentials posted to ``POST /auth``."""
    email: str | None = Field(None, validate_default=True, examples=["a@x.com"])
    password: str | None = Field(None, validate_default=True, examples=["secret123"])

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str | None) -> str:
        if value is None or value == "":
            raise PydanticCustomError("missing", "Password is required")
        return value


class RegisterRequest(BaseModel):
    """New account posted to ``POST /users``."""
    name: str | None = Field(None, validate_default=True, examples=["Ada Lovelace"])
    email: str | None = Field(None, validate_default=True, examples=["ada@mail.com"])
    password: str | None = Field(None, validate_default=True, examples=["secret123"])

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str | None) -> str:
        return required(value, "Name is required")

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str | None) -> str:
        if value is None or len(value) < 6:
            raise PydanticCustomError("value_error", "Please enter a password with 6 or more characters")
        return value


class TokenResponse(BaseModel):
    token: str = Field(..., description="Signed JWT to send back in the x-auth-token header")


class UserResponse(BaseModel):
    """Authenticated user, without the password hash."""
    id: str = Field(..., description="Unique identifier of the user")
    name: str = Field(..., description="Display name", examples=["Ada Lovelace"])
    email: str = Field(..., description="Email address", examples=["ada@mail.com"])
    avatar: str | None = Field(None, description="Avatar image URL")
    created_at: datetime | None = Field(None, description="When the account was created")

    @classmethod
    def from_entity(cls, user: UserEntity) -> UserResponse:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            created_at=user.created_at,
        )
