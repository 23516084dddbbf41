"""RecordStore interface shared by the JSON-file and SQL backends."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from stargazers.core.errors import ConflictError

Record = dict[str, Any]


class RecordStore(ABC):
    """
    Collection of records of one entity type with unique fields.

    unique_fields maps field name -> label used in conflict messages
    ("Email" -> "Email already exists"). Fields are checked in mapping order.
    Implementations must make insert_if_absent and update_where atomic with
    respect to the uniqueness check.
    """

    def __init__(self, name: str, unique_fields: Mapping[str, str]) -> None:
        self.name = name
        self.unique_fields = dict(unique_fields)

    def conflict(self, field: str) -> ConflictError:
        return ConflictError(f"{self.unique_fields[field]} already exists", field=field)

    def find_conflict(
        self,
        records: Iterable[Mapping[str, Any]],
        candidate: Mapping[str, Any],
        skip: Mapping[str, Any] | None = None,
    ) -> str | None:
        """Return the first unique field of candidate already taken by another record."""
        others = [r for r in records if r is not skip]
        for field in self.unique_fields:
            value = candidate.get(field)
            if value is None:
                continue
            if any(r.get(field) == value for r in others):
                return field
        return None

    @abstractmethod
    def find_unique(self, field: str, value: Any) -> Record | None:
        """Return the record whose field equals value, or None."""

    @abstractmethod
    def list_all(self) -> list[Record]:
        """Return every record in insertion (or primary key) order."""

    @abstractmethod
    def insert_if_absent(self, record: Mapping[str, Any]) -> Record:
        """Insert record unless a unique field collides; raises ConflictError."""

    @abstractmethod
    def update_where(self, field: str, value: Any, patch: Mapping[str, Any]) -> Record | None:
        """Apply patch to the record matching field == value; None if no match."""

    @abstractmethod
    def delete_where(self, field: str, value: Any) -> Record | None:
        """Remove and return the record matching field == value; None if no match."""

    @abstractmethod
    def ping(self) -> bool:
        """True if the backend is reachable."""
