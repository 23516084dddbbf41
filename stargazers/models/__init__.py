"""SQLAlchemy ORM models."""

from stargazers.models.base import Base
from stargazers.models.event import Event
from stargazers.models.user import User

__all__ = ["Base", "Event", "User"]
