"""SQL engine and session factory for the SQL record store backend."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from stargazers.core.config import Settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: "Settings") -> Engine:
    """Create the engine for DATABASE_URL. In-memory SQLite shares one connection across threads."""
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        # Writers wait up to 30s for the SQLite write lock instead of failing at once.
        kwargs: dict = {"connect_args": {"check_same_thread": False, "timeout": 30}}
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.DEBUG, **kwargs)
    return create_engine(url, pool_pre_ping=True, echo=settings.DEBUG)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory; records are read after commit, so expire_on_commit is off."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("Database connectivity check failed", exc_info=True)
        return False
