"""One-time import of the legacy stargazing JSON exports into the record stores.

Legacy user records look like::

    {"_id": {"$oid": "..."}, "username": "...", "email": "...",
     "password": "<plaintext or bcrypt>", "roles": "admin",
     "createdAt": "...", "updatedAt": "..."}

Plaintext passwords are hashed on the way in, so the service never has to
compare stored plaintext. Records that collide with existing ones are skipped,
which makes the import safe to re-run. Timestamps are normalised to ISO-8601
UTC; records that cannot be converted or stored are skipped and reported.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from stargazers.core.errors import ConflictError, ValidationError
from stargazers.core.security import hash_password, is_password_hash
from stargazers.schemas.common import ROLES, normalize_email
from stargazers.store.base import RecordStore

if TYPE_CHECKING:
    from stargazers.core.config import Settings

logger = logging.getLogger(__name__)

# toLocaleString("en-SG") output of the old server, in Singapore time (no DST).
LEGACY_DISPLAY_FORMATS = ("%d/%m/%Y, %I:%M:%S %p", "%d/%m/%Y, %H:%M:%S")
LEGACY_DISPLAY_TZ = timezone(timedelta(hours=8))

EVENT_FIELDS = {
    "eventName": "event_name",
    "eventDate": "event_date",
    "startTime": "start_time",
    "endTime": "end_time",
    "location": "location",
    "description": "description",
    "participantsLimit": "participants_limit",
}


class LegacyRecordError(ValueError):
    """A legacy record is missing required data and cannot be imported."""


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def _unwrap(value: Any) -> Any:
    """Unwrap Mongo extended-JSON values such as {"$oid": ...} and {"$date": ...}."""
    if isinstance(value, Mapping):
        for key in ("$oid", "$date"):
            if key in value:
                return value[key]
    return value


def _timestamp(value: Any, default: str) -> str:
    """
    Normalise a legacy timestamp to ISO-8601 in UTC.

    Accepts ISO strings (naive ones are taken as UTC), epoch milliseconds and
    the old server's "en-SG" display strings, which are Singapore local time.
    """
    value = _unwrap(value)
    if isinstance(value, Mapping) and "$numberLong" in value:
        try:
            value = int(value["$numberLong"])
        except (TypeError, ValueError) as e:
            raise LegacyRecordError(f"unrecognised timestamp {value!r}") from e
    if value in (None, ""):
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=UTC).isoformat()
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in LEGACY_DISPLAY_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt).replace(tzinfo=LEGACY_DISPLAY_TZ)
                break
            except ValueError:
                continue
        if parsed is None:
            raise LegacyRecordError(f"unrecognised timestamp {text!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).isoformat()


def _legacy_id(raw: Mapping[str, Any]) -> str:
    value = _unwrap(raw.get("id") or raw.get("_id"))
    value = str(value) if value else ""
    return value if 0 < len(value) <= 32 else uuid.uuid4().hex


def convert_legacy_user(raw: Mapping[str, Any], settings: "Settings") -> dict[str, Any]:
    """Map a legacy user to the current record shape, hashing a plaintext password."""
    username = str(raw.get("username") or "").strip()
    email = str(raw.get("email") or "").strip()
    if not username or not email:
        raise LegacyRecordError("username and email are required")

    secret = raw.get("password_hash") or raw.get("passwordHash") or raw.get("password")
    if not secret:
        raise LegacyRecordError(f"user {email} has no password")
    secret = str(secret)
    password_hash = secret if is_password_hash(secret) else hash_password(
        secret, rounds=settings.BCRYPT_ROUNDS
    )

    role = str(raw.get("role") or raw.get("roles") or "user").strip().lower()
    created_at = _timestamp(
        raw.get("created_at") or raw.get("createdAt"), datetime.now(UTC).isoformat()
    )
    updated_at = _timestamp(raw.get("updated_at") or raw.get("updatedAt"), created_at)
    return {
        "id": _legacy_id(raw),
        "username": username,
        "email": normalize_email(email),
        "password_hash": password_hash,
        "role": role if role in ROLES else "user",
        "created_at": created_at,
        "updated_at": updated_at,
    }


def convert_legacy_event(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Map a legacy camelCase event to snake_case; the store assigns a fresh id."""
    record: dict[str, Any] = {}
    for legacy_key, key in EVENT_FIELDS.items():
        value = raw.get(legacy_key, raw.get(key))
        if value in (None, ""):
            raise LegacyRecordError(f"event is missing {legacy_key}")
        record[key] = value
    try:
        record["participants_limit"] = int(record["participants_limit"])
    except (TypeError, ValueError) as e:
        raise LegacyRecordError("participantsLimit must be an integer") from e
    return record


def _import(
    store: RecordStore, raw_records: Iterable[Any], convert: Any, label: str
) -> ImportResult:
    result = ImportResult()
    for index, raw in enumerate(raw_records):
        try:
            if not isinstance(raw, Mapping):
                raise LegacyRecordError("record must be an object")
            store.insert_if_absent(convert(raw))
            result.imported += 1
        except ConflictError as e:
            result.skipped += 1
            logger.info("Skipping %s at index %s: %s", label, index, e.message)
        except LegacyRecordError as e:
            result.skipped += 1
            result.errors.append(f"{label}[{index}]: {e}")
            logger.warning("Invalid %s at index %s: %s", label, index, e)
        except ValidationError as e:
            result.skipped += 1
            result.errors.append(f"{label}[{index}]: {e.message}")
            logger.warning("Rejected %s at index %s: %s", label, index, e.message)
    return result


def import_users(
    store: RecordStore, raw_users: Iterable[Any], settings: "Settings"
) -> ImportResult:
    return _import(store, raw_users, lambda raw: convert_legacy_user(raw, settings), "user")


def import_events(store: RecordStore, raw_events: Iterable[Any]) -> ImportResult:
    return _import(store, raw_events, convert_legacy_event, "event")
