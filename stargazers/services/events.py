"""Stargazing events: public reads, admin writes."""

import logging

from stargazers.core.errors import NotFoundError
from stargazers.schemas.event import EventCreate, EventUpdate
from stargazers.store.base import Record, RecordStore

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND = "Event not found"


def list_events(store: RecordStore) -> list[Record]:
    return store.list_all()


def get_event(store: RecordStore, event_id: int) -> Record:
    event = store.find_unique("id", event_id)
    if event is None:
        raise NotFoundError(EVENT_NOT_FOUND)
    return event


def get_event_by_name(store: RecordStore, event_name: str) -> Record:
    event = store.find_unique("event_name", event_name)
    if event is None:
        raise NotFoundError(EVENT_NOT_FOUND)
    return event


def create_event(store: RecordStore, body: EventCreate) -> Record:
    """Insert a new event; the store assigns the integer id."""
    created = store.insert_if_absent(body.model_dump())
    logger.info("Event created", extra={"event_id": created["id"]})
    return created


def update_event(store: RecordStore, event_name: str, body: EventUpdate) -> Record:
    """Apply the non-empty fields of body to the event named event_name."""
    patch = {
        k: v for k, v in body.model_dump(exclude_unset=True).items() if v not in (None, "")
    }
    updated = store.update_where("event_name", event_name, patch)
    if updated is None:
        raise NotFoundError(EVENT_NOT_FOUND)
    logger.info("Event updated", extra={"event_id": updated["id"], "fields": sorted(patch)})
    return updated


def delete_event(store: RecordStore, event_name: str) -> Record:
    deleted = store.delete_where("event_name", event_name)
    if deleted is None:
        raise NotFoundError(EVENT_NOT_FOUND)
    logger.info("Event deleted", extra={"event_id": deleted["id"]})
    return deleted
