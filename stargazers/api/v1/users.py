"""User endpoints: own profile for any session, management for admins."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from stargazers.api.deps import get_app_settings, get_user_store
from stargazers.api.v1.auth import get_current_user, require_admin, set_session_cookie
from stargazers.core.config import Settings
from stargazers.core.errors import NotFoundError
from stargazers.schemas.auth import CurrentUser
from stargazers.schemas.user import UserCreate, UserDeleteResponse, UserPublic, UserUpdate
from stargazers.services import users as users_service
from stargazers.store import RecordStore

router = APIRouter()


@router.get("/me", response_model=UserPublic)
def read_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[RecordStore, Depends(get_user_store)],
) -> UserPublic:
    """Return the caller's own record as currently stored."""
    user = store.find_unique("id", current_user.id)
    if user is None:
        raise NotFoundError("User not found")
    return users_service.to_public(user)


@router.get("", response_model=list[UserPublic])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[RecordStore, Depends(get_user_store)],
) -> list[UserPublic]:
    """List all users (admin only)."""
    return [users_service.to_public(u) for u in users_service.list_users(store)]


@router.get("/{email}", response_model=UserPublic)
def get_user(
    email: str,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[RecordStore, Depends(get_user_store)],
) -> UserPublic:
    return users_service.to_public(users_service.get_user(store, email))


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[RecordStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserPublic:
    """Create a user with any role (admin only). Without a password, DEFAULT_USER_PASSWORD is used."""
    return users_service.to_public(users_service.create_user(store, body, settings))


@router.put("/{email}", response_model=UserPublic)
def update_user(
    email: str,
    body: UserUpdate,
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[RecordStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserPublic:
    """
    Update a user. Non-admins may only update their own record and cannot
    change its role; admins may update anything.

    When callers update their own record the session cookie is re-issued so the
    token claims match the stored username, email and role.
    """
    updated = users_service.update_user(store, current_user, email, body, settings)
    if updated["id"] == current_user.id:
        set_session_cookie(response, updated, settings)
    return users_service.to_public(updated)


@router.delete("/{email}", response_model=UserDeleteResponse)
def delete_user(
    email: str,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[RecordStore, Depends(get_user_store)],
) -> UserDeleteResponse:
    deleted = users_service.delete_user(store, email)
    return UserDeleteResponse(
        message="User deleted successfully", user=users_service.to_public(deleted)
    )
