"""Account DTOs for the Service Layer.

Immutable Pydantic v2 contracts between the API layer and
``AccountService``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.accounts.constants import PASSWORD_MIN_LENGTH


class RegisterUserDTO(BaseModel):
    """Input for self-registration; the resulting account has role USER."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v


class LoginDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    password: str
