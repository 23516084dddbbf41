"""User accounts: signup, credential checks, self-service and admin management."""

import logging
import uuid
from datetime import UTC, datetime
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from stargazers.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from stargazers.core.security import BCRYPT_ROUNDS, hash_password, verify_password
from stargazers.schemas.auth import CurrentUser, SignupRequest
from stargazers.schemas.common import ROLES, normalize_email
from stargazers.schemas.user import UserCreate, UserPublic, UserUpdate
from stargazers.store.base import Record, RecordStore

if TYPE_CHECKING:
    from stargazers.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def _now() -> str:
    return datetime.now(UTC).isoformat()


def to_public(record: Record) -> UserPublic:
    """Strip the password hash; the only way records leave the service."""
    return UserPublic.model_validate(
        {k: v for k, v in record.items() if k != "password_hash"}
    )


def _new_user_record(
    username: str, email: str, password: str, role: str, settings: "Settings"
) -> dict[str, Any]:
    now = _now()
    return {
        "id": uuid.uuid4().hex,
        "username": username,
        "email": email,
        "password_hash": hash_password(password, rounds=settings.BCRYPT_ROUNDS),
        "role": role,
        "created_at": now,
        "updated_at": now,
    }


def find_by_username_or_email(store: RecordStore, identifier: str) -> Record | None:
    """Look the identifier up as a username first, then as an email."""
    return store.find_unique("username", identifier) or store.find_unique(
        "email", normalize_email(identifier)
    )


def signup(store: RecordStore, body: SignupRequest, settings: "Settings") -> Record:
    """Self-service registration. The role is always 'user'."""
    record = _new_user_record(body.username, body.email, body.password, "user", settings)
    created = store.insert_if_absent(record)
    logger.info("User signed up", extra={"user_id": created["id"]})
    return created


@lru_cache
def _dummy_hash(rounds: int) -> str:
    """Throwaway hash checked for unknown identifiers, so they cost as much as a wrong password."""
    return hash_password(uuid.uuid4().hex, rounds=rounds)


def authenticate(
    store: RecordStore, identifier: str | None, password: str, rounds: int = BCRYPT_ROUNDS
) -> Record:
    """
    Return the user matching identifier and password.

    Unknown identifier and wrong password raise the same AuthenticationError
    after the same bcrypt work.
    """
    if not identifier:
        raise ValidationError("Username or email is required")
    user = find_by_username_or_email(store, identifier)
    stored_hash = user.get("password_hash") if user is not None else None
    password_ok = verify_password(password, stored_hash or _dummy_hash(rounds))
    if user is None or not password_ok:
        logger.info("Login failed", extra={"identifier": identifier})
        raise AuthenticationError(INVALID_CREDENTIALS)
    return user


def list_users(store: RecordStore) -> list[Record]:
    return store.list_all()


def get_user(store: RecordStore, email: str) -> Record:
    user = store.find_unique("email", normalize_email(email))
    if user is None:
        raise NotFoundError("User not found")
    return user


def create_user(store: RecordStore, body: UserCreate, settings: "Settings") -> Record:
    """Admin-initiated creation with a selectable role."""
    password = body.password or settings.DEFAULT_USER_PASSWORD.get_secret_value()
    record = _new_user_record(body.username, body.email, password, body.role, settings)
    created = store.insert_if_absent(record)
    logger.info(
        "User created by admin",
        extra={"user_id": created["id"], "role": created["role"]},
    )
    return created


def update_user(
    store: RecordStore,
    identity: CurrentUser,
    email: str,
    body: UserUpdate,
    settings: "Settings",
) -> Record:
    """
    Update the user keyed by email.

    Non-admins may only update their own record, and any role they send is
    ignored. Admins may update any record including its role.
    """
    email = normalize_email(email)
    if not identity.is_admin and identity.email != email:
        raise AuthorizationError()

    patch = body.model_dump(exclude_unset=True, exclude_none=True)
    role = patch.pop("role", None)
    if role is not None:
        if identity.is_admin:
            if role not in ROLES:
                raise ValidationError("Role must be 'user' or 'admin'")
            patch["role"] = role
        else:
            logger.info("Ignoring role change from non-admin", extra={"user_id": identity.id})

    password = patch.pop("password", None)
    if password:
        patch["password_hash"] = hash_password(password, rounds=settings.BCRYPT_ROUNDS)
    patch["updated_at"] = _now()

    updated = store.update_where("email", email, patch)
    if updated is None:
        raise NotFoundError("User not found")
    logger.info(
        "User updated",
        extra={"user_id": updated["id"], "by": identity.id, "fields": sorted(patch)},
    )
    return updated


def delete_user(store: RecordStore, email: str) -> Record:
    deleted = store.delete_where("email", normalize_email(email))
    if deleted is None:
        raise NotFoundError("User not found")
    logger.info("User deleted", extra={"user_id": deleted["id"]})
    return deleted
