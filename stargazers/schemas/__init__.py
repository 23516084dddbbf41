"""Pydantic request/response schemas."""

from stargazers.schemas.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    SessionClaims,
    SignupRequest,
)
from stargazers.schemas.common import ErrorResponse, MessageResponse
from stargazers.schemas.event import (
    EventCreate,
    EventDeleteResponse,
    EventPublic,
    EventUpdate,
)
from stargazers.schemas.health import HealthResponse
from stargazers.schemas.user import UserCreate, UserDeleteResponse, UserPublic, UserUpdate

__all__ = [
    "AuthResponse",
    "CurrentUser",
    "ErrorResponse",
    "EventCreate",
    "EventDeleteResponse",
    "EventPublic",
    "EventUpdate",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "SessionClaims",
    "SignupRequest",
    "UserCreate",
    "UserDeleteResponse",
    "UserPublic",
    "UserUpdate",
]
