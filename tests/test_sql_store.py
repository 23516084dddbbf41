"""Unit tests for stargazers.store.sql against SQLite (in-memory and file-backed)."""

import tempfile
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

from pydantic import SecretStr

from stargazers.core.config import Settings
from stargazers.core.errors import ConflictError
from stargazers.models import Base
from stargazers.schemas.auth import SignupRequest
from stargazers.services.users import signup
from stargazers.store import build_stores


def _user(username: str = "ann", email: str = "ann@x.com", **kwargs: object) -> dict:
    record = {
        "id": f"id{username}",
        "username": username,
        "email": email,
        "password_hash": "$2b$04$" + "a" * 53,
        "role": "user",
        "created_at": "2026-01-01T10:00:00+00:00",
        "updated_at": "2026-01-01T10:00:00+00:00",
    }
    record.update(kwargs)
    return record


def _event(name: str = "Perseids", **kwargs: object) -> dict:
    record = {
        "event_name": name,
        "event_date": "2026-08-12",
        "start_time": "21:00",
        "end_time": "23:30",
        "location": "Observatory Hill",
        "description": "Meteor shower watch",
        "participants_limit": 30,
    }
    record.update(kwargs)
    return record


class SqlStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        settings = Settings(
            _env_file=None,
            STORE_BACKEND="sql",
            DATABASE_URL="sqlite://",
            JWT_SECRET=SecretStr("test-secret"),
        )
        self.stores = build_stores(settings)
        Base.metadata.create_all(self.stores.engine)
        self.users = self.stores.users
        self.events = self.stores.events

    def tearDown(self) -> None:
        self.stores.engine.dispose()


class TestSqlUsers(SqlStoreTestCase):
    def test_backend_selected_by_configuration(self) -> None:
        self.assertEqual(self.stores.backend, "sql")
        self.assertTrue(self.users.ping())

    def test_insert_find_round_trip(self) -> None:
        created = self.users.insert_if_absent(_user())
        self.assertEqual(created["username"], "ann")
        found = self.users.find_unique("email", "ann@x.com")
        self.assertEqual(found["id"], "idann")
        self.assertEqual(found["created_at"], "2026-01-01T10:00:00+00:00")
        self.assertEqual(found["updated_at"], "2026-01-01T10:00:00+00:00")

    def test_timestamps_read_back_in_utc(self) -> None:
        self.users.insert_if_absent(_user(created_at="2026-01-01T18:00:00+08:00"))
        found = self.users.find_unique("username", "ann")
        self.assertEqual(found["created_at"], "2026-01-01T10:00:00+00:00")

    def test_conflicts_match_json_backend_messages(self) -> None:
        self.users.insert_if_absent(_user())
        with self.assertRaises(ConflictError) as ctx:
            self.users.insert_if_absent(_user(id="other"))
        self.assertEqual(ctx.exception.message, "Email already exists")
        with self.assertRaises(ConflictError) as ctx:
            self.users.insert_if_absent(_user(id="other", email="else@x.com"))
        self.assertEqual(ctx.exception.message, "Username already exists")

    def test_unique_index_catches_race_past_precheck(self) -> None:
        self.users.insert_if_absent(_user())
        real_check = self.users._raise_on_conflict
        calls = iter([lambda *a, **k: None, real_check])

        # First check sees a stale view (no conflict); the unique index must still refuse.
        with patch.object(
            self.users, "_raise_on_conflict", side_effect=lambda *a, **k: next(calls)(*a, **k)
        ):
            with self.assertRaises(ConflictError) as ctx:
                self.users.insert_if_absent(_user(id="racer", email="ann@x.com", username="racer"))
        self.assertEqual(ctx.exception.message, "Email already exists")
        self.assertEqual(len(self.users.list_all()), 1)

    def test_update_excludes_self_from_uniqueness(self) -> None:
        self.users.insert_if_absent(_user())
        self.users.insert_if_absent(_user("bob", "bob@x.com"))
        updated = self.users.update_where("email", "ann@x.com", {"username": "ann", "role": "admin"})
        self.assertEqual(updated["role"], "admin")
        with self.assertRaises(ConflictError):
            self.users.update_where("email", "bob@x.com", {"email": "ann@x.com"})
        self.assertIsNone(self.users.update_where("email", "nobody@x.com", {"role": "admin"}))

    def test_delete(self) -> None:
        self.users.insert_if_absent(_user())
        deleted = self.users.delete_where("email", "ann@x.com")
        self.assertEqual(deleted["username"], "ann")
        self.assertEqual(self.users.list_all(), [])
        self.assertIsNone(self.users.delete_where("email", "ann@x.com"))


class TestSqlEvents(SqlStoreTestCase):
    def test_autoincrement_ids_and_lookup(self) -> None:
        first = self.events.insert_if_absent(_event())
        second = self.events.insert_if_absent(_event("Geminids"))
        self.assertEqual((first["id"], second["id"]), (1, 2))
        self.assertEqual(self.events.find_unique("id", 2)["event_name"], "Geminids")
        self.assertEqual([e["event_name"] for e in self.events.list_all()], ["Perseids", "Geminids"])

    def test_duplicate_event_name(self) -> None:
        self.events.insert_if_absent(_event())
        with self.assertRaises(ConflictError) as ctx:
            self.events.insert_if_absent(_event())
        self.assertEqual(ctx.exception.message, "Event name already exists")


class TestSqlConcurrentWriters(unittest.TestCase):
    """Racing signups on a file-backed database: the unique index leaves one survivor."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = Settings(
            _env_file=None,
            STORE_BACKEND="sql",
            DATABASE_URL=f"sqlite:///{Path(self._tmp.name) / 'stargazers.db'}",
            JWT_SECRET=SecretStr("test-secret"),
            BCRYPT_ROUNDS=4,
        )
        self.stores = build_stores(self.settings)
        Base.metadata.create_all(self.stores.engine)

    def tearDown(self) -> None:
        self.stores.engine.dispose()
        self._tmp.cleanup()

    def test_same_username_single_survivor(self) -> None:
        attempts = 8
        barrier = threading.Barrier(attempts)

        def attempt(i: int) -> bool:
            body = SignupRequest(username="ann", email=f"ann{i}@x.com", password="Abcdef12")
            barrier.wait()
            try:
                signup(self.stores.users, body, self.settings)
                return True
            except ConflictError:
                return False

        with ThreadPoolExecutor(max_workers=attempts) as pool:
            results = list(pool.map(attempt, range(attempts)))

        self.assertEqual(results.count(True), 1)
        self.assertEqual([u["username"] for u in self.stores.users.list_all()], ["ann"])


if __name__ == "__main__":
    unittest.main()
