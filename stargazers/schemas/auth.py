"""Request/response schemas for auth endpoints and session identity."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from stargazers.schemas.common import (
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    Role,
    validate_password_strength,
)
from stargazers.schemas.user import UserPublic


class SignupRequest(BaseModel):
    """Self-service registration. Role is always 'user'."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class LoginRequest(BaseModel):
    """Credentials for login: username or email, plus password."""

    username: str | None = Field(default=None, max_length=USERNAME_MAX_LEN)
    email: str | None = Field(default=None, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=128)

    @property
    def identifier(self) -> str | None:
        return (self.username or "").strip() or (self.email or "").strip() or None


class CurrentUser(BaseModel):
    """Authenticated identity attached to a request."""

    id: str
    email: str
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SessionClaims(CurrentUser):
    """Decoded session token claims."""

    iat: int
    exp: int

    def identity(self) -> CurrentUser:
        return CurrentUser(id=self.id, email=self.email, username=self.username, role=self.role)


class AuthResponse(BaseModel):
    """Response for signup and login; the token itself travels in the cookie."""

    message: str
    user: UserPublic
