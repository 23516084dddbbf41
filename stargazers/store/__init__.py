"""Record stores for users and events, built once from settings."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import Engine

from stargazers.core.database import create_db_engine, create_session_factory
from stargazers.models import Event, User
from stargazers.store.base import Record, RecordStore
from stargazers.store.json_file import JsonFileStore
from stargazers.store.sql import SqlRecordStore

if TYPE_CHECKING:
    from stargazers.core.config import Settings

logger = logging.getLogger(__name__)

# Field -> label for conflict messages; email is checked before username.
USER_UNIQUE_FIELDS = {"email": "Email", "username": "Username"}
EVENT_UNIQUE_FIELDS = {"event_name": "Event name"}


@dataclass
class Stores:
    """The active record stores; engine is set only for the SQL backend."""

    backend: str
    users: RecordStore
    events: RecordStore
    engine: Engine | None = None


def build_stores(settings: "Settings") -> Stores:
    """Build the record stores for STORE_BACKEND."""
    if settings.STORE_BACKEND == "sql":
        engine = create_db_engine(settings)
        session_factory = create_session_factory(engine)
        logger.info("Using SQL record store (%s)", engine.url.render_as_string(hide_password=True))
        return Stores(
            backend="sql",
            users=SqlRecordStore(session_factory, User, "users", USER_UNIQUE_FIELDS),
            events=SqlRecordStore(session_factory, Event, "events", EVENT_UNIQUE_FIELDS),
            engine=engine,
        )
    logger.info("Using JSON file record store in %s", settings.DATA_DIR)
    return Stores(
        backend="json",
        users=JsonFileStore(settings.users_path, "users", USER_UNIQUE_FIELDS),
        events=JsonFileStore(
            settings.events_path, "events", EVENT_UNIQUE_FIELDS, auto_increment_id=True
        ),
    )


__all__ = [
    "EVENT_UNIQUE_FIELDS",
    "USER_UNIQUE_FIELDS",
    "JsonFileStore",
    "Record",
    "RecordStore",
    "SqlRecordStore",
    "Stores",
    "build_stores",
]
