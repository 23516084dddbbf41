"""ORM model for stargazing events."""

from sqlalchemy import Column, Integer, String, Text

from stargazers.models.base import Base


class Event(Base):
    """Scheduled stargazing event; event_name is unique and used as the update/delete key."""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_name = Column(String(255), nullable=False, unique=True, index=True)
    event_date = Column(String(64), nullable=False)
    start_time = Column(String(64), nullable=False)
    end_time = Column(String(64), nullable=False)
    location = Column(String(1024), nullable=False)
    description = Column(Text, nullable=False)
    participants_limit = Column(Integer, nullable=False)
