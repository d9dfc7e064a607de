from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

_USERNAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_.-]*$")


class RegisterRequestDTO(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not _USERNAME_RE.match(value):
            raise ValueError(
                "Username must start with a letter and contain only letters, digits, '_', '.' or '-'"
            )
        return value


class LoginRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login


class AuthSuccessDTO(BaseModel):
    ok: bool = True


class IdentityDTO(BaseModel):
    id: str
    username: str
    access_level: int
