"""Password hashing and JWT session token creation/verification."""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt
from pydantic import ValidationError as PydanticValidationError

from stargazers.core.errors import InvalidTokenError
from stargazers.schemas.auth import SessionClaims

if TYPE_CHECKING:
    from stargazers.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Identifying prefixes of bcrypt hashes ($2a$, $2b$, $2y$).
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def is_password_hash(value: str | None) -> bool:
    """True if value looks like a bcrypt hash rather than a legacy plaintext password."""
    return bool(value) and value.startswith(BCRYPT_PREFIXES) and len(value) == 60


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Non-bcrypt values never match."""
    if not is_password_hash(hashed):
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_session_token(user: Mapping[str, Any], settings: "Settings") -> str:
    """Create a JWT embedding id, email, username and role, valid JWT_EXPIRE_MINUTES."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "id": str(user["id"]),
        "email": user["email"],
        "username": user["username"],
        "role": user["role"],
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_session_token(token: str, settings: "Settings") -> SessionClaims:
    """
    Decode and validate a session JWT.

    Bad signature, malformed structure, expiry and missing claims all raise the
    same InvalidTokenError so callers cannot tell them apart.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
        return SessionClaims.model_validate(payload)
    except (jwt.PyJWTError, PydanticValidationError):
        raise InvalidTokenError() from None
