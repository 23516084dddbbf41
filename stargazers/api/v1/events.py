"""Event endpoints: public listing and lookup, admin-only writes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from stargazers.api.deps import get_event_store
from stargazers.api.v1.auth import get_optional_user, require_admin
from stargazers.schemas.auth import CurrentUser
from stargazers.schemas.event import EventCreate, EventDeleteResponse, EventPublic, EventUpdate
from stargazers.services import events as events_service
from stargazers.store import RecordStore

router = APIRouter()

OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
EventStore = Annotated[RecordStore, Depends(get_event_store)]


@router.get("", response_model=list[EventPublic])
def list_events(_user: OptionalUser, store: EventStore) -> list[EventPublic]:
    return [EventPublic.model_validate(e) for e in events_service.list_events(store)]


@router.get("/name/{event_name}", response_model=EventPublic)
def get_event_by_name(event_name: str, _user: OptionalUser, store: EventStore) -> EventPublic:
    return EventPublic.model_validate(events_service.get_event_by_name(store, event_name))


@router.get("/{event_id}", response_model=EventPublic)
def get_event(event_id: int, _user: OptionalUser, store: EventStore) -> EventPublic:
    return EventPublic.model_validate(events_service.get_event(store, event_id))


@router.post("", response_model=EventPublic, status_code=status.HTTP_201_CREATED)
def create_event(body: EventCreate, _admin: AdminUser, store: EventStore) -> EventPublic:
    """Create an event (admin only). All fields are required and eventName must be unique."""
    return EventPublic.model_validate(events_service.create_event(store, body))


@router.put("/{event_name}", response_model=EventPublic)
def update_event(
    event_name: str, body: EventUpdate, _admin: AdminUser, store: EventStore
) -> EventPublic:
    """Update an event by name (admin only). Renaming checks the new name is free."""
    return EventPublic.model_validate(events_service.update_event(store, event_name, body))


@router.delete("/{event_name}", response_model=EventDeleteResponse)
def delete_event(event_name: str, _admin: AdminUser, store: EventStore) -> EventDeleteResponse:
    deleted = events_service.delete_event(store, event_name)
    return EventDeleteResponse(
        message="Event deleted successfully", event=EventPublic.model_validate(deleted)
    )
