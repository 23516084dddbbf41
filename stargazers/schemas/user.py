"""Request/response schemas for user management endpoints."""

from pydantic import AliasChoices, EmailStr, Field, field_validator

from stargazers.schemas.common import (
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    CamelModel,
    Role,
    validate_password_strength,
)


class UserPublic(CamelModel):
    """User record as returned to clients (never includes the password hash)."""

    id: str
    username: str
    email: str
    role: Role
    created_at: str | None = None
    updated_at: str | None = None


class UserCreate(CamelModel):
    """Admin-initiated user creation; role is selectable, password optional."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr
    password: str | None = Field(default=None, description="Defaults to DEFAULT_USER_PASSWORD")
    role: Role = Field(default="user", validation_alias=AliasChoices("role", "roles"))

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        return None if v is None else validate_password_strength(v)


class UserUpdate(CamelModel):
    """
    Partial update of a user record.

    role is kept as a free string: it is ignored for non-admin callers and only
    validated when an admin applies it.
    """

    username: str | None = Field(default=None, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr | None = None
    password: str | None = None
    role: str | None = Field(default=None, validation_alias=AliasChoices("role", "roles"))

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        return None if v is None else validate_password_strength(v)


class UserDeleteResponse(CamelModel):
    """Response for DELETE /users/{email}."""

    message: str
    user: UserPublic
