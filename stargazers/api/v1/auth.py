"""Signup/login/logout and the session dependencies (get_current_user, require_role)."""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import APIKeyCookie

from stargazers.api.deps import get_app_settings, get_user_store
from stargazers.core.config import Settings
from stargazers.core.errors import AuthenticationError, AuthorizationError, InvalidTokenError
from stargazers.core.security import create_session_token, decode_session_token
from stargazers.schemas.auth import AuthResponse, CurrentUser, LoginRequest, SignupRequest
from stargazers.schemas.common import MessageResponse
from stargazers.services import users as users_service
from stargazers.store import RecordStore

router = APIRouter()

SESSION_COOKIE = "token"  # NOQA: S105
session_cookie = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)


def set_session_cookie(response: Response, user: dict[str, Any], settings: Settings) -> None:
    """Issue a session token for user and set it as an HttpOnly cookie.

    The cookie is:
    - HttpOnly: not readable by page scripts
    - Secure: HTTPS only, in production
    - SameSite=lax
    - Max-Age: the token lifetime (7 days by default)
    """
    response.set_cookie(
        key=SESSION_COOKIE,
        value=create_session_token(user, settings),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Clear the session cookie (logout). The token itself stays valid until it expires."""
    response.delete_cookie(
        key=SESSION_COOKIE,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def get_current_user(
    token: Annotated[str | None, Depends(session_cookie)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CurrentUser:
    """Dependency: require a valid session cookie. 401 if missing, 403 if invalid or expired."""
    if not token:
        raise AuthenticationError("Unauthorized")
    return decode_session_token(token, settings).identity()


def get_optional_user(
    token: Annotated[str | None, Depends(session_cookie)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CurrentUser | None:
    """Dependency: identity if the session cookie is valid, else None (never raises)."""
    if not token:
        return None
    try:
        return decode_session_token(token, settings).identity()
    except InvalidTokenError:
        return None


def require_role(*roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory: authenticated user whose role is one of roles, else 403."""
    allowed = frozenset(roles)

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise AuthorizationError()
        return current_user

    return dependency


require_admin = require_role("admin")


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    response: Response,
    store: Annotated[RecordStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthResponse:
    """Create an account with role 'user' and start a session."""
    user = users_service.signup(store, body, settings)
    set_session_cookie(response, user, settings)
    return AuthResponse(message="User created successfully", user=users_service.to_public(user))


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    store: Annotated[RecordStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthResponse:
    """
    Authenticate with username (or email) and password.
    The session token is returned in the HttpOnly "token" cookie.
    """
    user = users_service.authenticate(
        store, body.identifier, body.password, rounds=settings.BCRYPT_ROUNDS
    )
    set_session_cookie(response, user, settings)
    return AuthResponse(message="Login successful", user=users_service.to_public(user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")
