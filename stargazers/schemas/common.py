"""Shared schema base and validators."""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 2
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

Role = Literal["user", "admin"]
ROLES: frozenset[str] = frozenset({"user", "admin"})


class CamelModel(BaseModel):
    """Serializes with camelCase keys (as the frontend expects); accepts camelCase or snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str = Field(..., description="Human-readable result")


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str = Field(..., description="Error message")


def normalize_email(value: str) -> str:
    """Lower-case the domain part, as EmailStr does; the local part is kept as typed."""
    local, sep, domain = value.strip().rpartition("@")
    return f"{local}@{domain.lower()}" if sep else value.strip()


def validate_password_strength(value: str) -> str:
    """Require 8-128 chars with at least one uppercase, one lowercase letter and one digit."""
    if not (PASSWORD_MIN_LEN <= len(value) <= PASSWORD_MAX_LEN):
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters."
        )
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter.")
    if not re.search(r"[0-9]", value):
        raise ValueError("Password must contain at least one digit.")
    return value
