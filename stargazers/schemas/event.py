"""Request/response schemas for stargazing events."""

from pydantic import BaseModel, Field

from stargazers.schemas.common import CamelModel


class EventPublic(CamelModel):
    """Event as returned to clients."""

    id: int
    event_name: str
    event_date: str
    start_time: str
    end_time: str
    location: str
    description: str
    participants_limit: int


class EventCreate(CamelModel):
    """New event (admin only). Every field is required."""

    event_name: str = Field(..., min_length=1, max_length=255)
    event_date: str = Field(..., min_length=1)
    start_time: str = Field(..., min_length=1)
    end_time: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    participants_limit: int = Field(..., gt=0)


class EventUpdate(CamelModel):
    """Partial event update; omitted or empty fields keep their current value."""

    event_name: str | None = Field(default=None, max_length=255)
    event_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None
    description: str | None = None
    participants_limit: int | None = Field(default=None, gt=0)


class EventDeleteResponse(BaseModel):
    """Response for DELETE /events/{event_name}."""

    message: str
    event: EventPublic
