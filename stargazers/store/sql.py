"""SQL record store: one SQLAlchemy model per entity type, uniqueness enforced by unique indexes."""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stargazers.core.database import check_db_connected
from stargazers.core.errors import StoreError, ValidationError
from stargazers.models.base import Base
from stargazers.store.base import Record, RecordStore

logger = logging.getLogger(__name__)


class SqlRecordStore(RecordStore):
    """
    Records stored as rows of an ORM model.

    Records are exchanged as plain dicts keyed by column name. DateTime columns
    are converted to and from ISO-8601 strings so records look the same as in
    the JSON backend. Inserts rely on the unique indexes: an IntegrityError
    raised by a racing writer becomes the same ConflictError as the pre-check.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        model: type[Base],
        name: str,
        unique_fields: Mapping[str, str],
    ) -> None:
        super().__init__(name, unique_fields)
        self._session_factory = session_factory
        self._model = model
        self._columns = {c.key: c for c in model.__table__.columns}
        self._pk = model.__mapper__.primary_key[0]

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            logger.exception("Database error on %s", self.name)
            raise StoreError(f"Failed to access {self.name}") from e

    def _attr(self, field: str) -> Any:
        if field not in self._columns:
            raise ValueError(f"Unknown field {field!r} for {self.name}")
        return getattr(self._model, field)

    def _to_record(self, row: Base) -> Record:
        record: Record = {}
        for key in self._columns:
            value = getattr(row, key)
            if isinstance(value, datetime):
                # SQLite drops the offset; stored values are always UTC.
                if value.tzinfo is None:
                    value = value.replace(tzinfo=UTC)
                value = value.isoformat()
            record[key] = value
        return record

    def _to_values(self, record: Mapping[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key, value in record.items():
            column = self._columns.get(key)
            if column is None:
                continue
            if isinstance(column.type, DateTime) and isinstance(value, str):
                try:
                    value = datetime.fromisoformat(value)
                except ValueError as e:
                    raise ValidationError(f"{key}: invalid timestamp") from e
            if isinstance(value, datetime) and value.tzinfo is not None:
                value = value.astimezone(UTC)
            values[key] = value
        return values

    def _raise_on_conflict(
        self, session: Session, values: Mapping[str, Any], exclude_pk: Any = None
    ) -> None:
        for field in self.unique_fields:
            if values.get(field) is None:
                continue
            stmt = select(self._model).where(self._attr(field) == values[field])
            if exclude_pk is not None:
                stmt = stmt.where(self._pk != exclude_pk)
            if session.scalars(stmt.limit(1)).first() is not None:
                raise self.conflict(field)

    def _commit(self, session: Session, values: Mapping[str, Any], exclude_pk: Any = None) -> None:
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            logger.info("Unique constraint hit on %s; re-checking for conflict", self.name)
            self._raise_on_conflict(session, values, exclude_pk)
            raise self.conflict(next(iter(self.unique_fields))) from e

    def _first(self, session: Session, field: str, value: Any) -> Base | None:
        stmt = select(self._model).where(self._attr(field) == value).limit(1)
        return session.scalars(stmt).first()

    def find_unique(self, field: str, value: Any) -> Record | None:
        with self._session() as session:
            row = self._first(session, field, value)
            return self._to_record(row) if row is not None else None

    def list_all(self) -> list[Record]:
        with self._session() as session:
            rows = session.scalars(select(self._model).order_by(self._pk)).all()
            return [self._to_record(row) for row in rows]

    def insert_if_absent(self, record: Mapping[str, Any]) -> Record:
        values = self._to_values(record)
        with self._session() as session:
            self._raise_on_conflict(session, values)
            row = self._model(**values)
            session.add(row)
            self._commit(session, values)
            return self._to_record(row)

    def update_where(self, field: str, value: Any, patch: Mapping[str, Any]) -> Record | None:
        values = self._to_values(patch)
        with self._session() as session:
            row = self._first(session, field, value)
            if row is None:
                return None
            row_pk = getattr(row, self._pk.key)
            self._raise_on_conflict(session, values, exclude_pk=row_pk)
            for key, new_value in values.items():
                setattr(row, key, new_value)
            self._commit(session, values, exclude_pk=row_pk)
            return self._to_record(row)

    def delete_where(self, field: str, value: Any) -> Record | None:
        with self._session() as session:
            row = self._first(session, field, value)
            if row is None:
                return None
            record = self._to_record(row)
            session.delete(row)
            session.commit()
            return record

    def ping(self) -> bool:
        try:
            with self._session_factory() as session:
                return check_db_connected(session)
        except SQLAlchemyError:
            return False
