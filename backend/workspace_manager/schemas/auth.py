"""Schemas for login and the current user."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_core import PydanticCustomError

from workspace_manager.schemas.common import (
    EMAIL_PATTERN,
    CamelModel,
    require_pattern,
)

MIN_PASSWORD_LENGTH = 6


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("required", "Email is required")
        return require_pattern(value, EMAIL_PATTERN, "Enter a valid email")

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "too_short",
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )
        return value


class UserOut(CamelModel):
    id: str
    email: str
    name: str


class LoginResponse(CamelModel):
    user: UserOut
    token: str
