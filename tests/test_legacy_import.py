"""Unit tests for the legacy JSON import (stargazers.services.legacy and its CLI)."""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import SecretStr

from stargazers.core.config import Settings
from stargazers.core.errors import ValidationError
from stargazers.core.security import hash_password, is_password_hash, verify_password
from stargazers.models import Base
from stargazers.scripts import migrate_legacy
from stargazers.services.legacy import (
    LegacyRecordError,
    convert_legacy_event,
    convert_legacy_user,
    import_events,
    import_users,
)
from stargazers.services.users import authenticate
from stargazers.store import build_stores

LEGACY_USERS = [
    {
        "_id": {"$oid": "65a1f0c2e4b0a1b2c3d4e5f6"},
        "username": "stella",
        "email": "stella@x.com",
        "password": "Plaintext1",
        "roles": "admin",
        "createdAt": {"$date": "2024-03-01T20:00:00.000Z"},
    },
    {
        "id": "legacy-2",
        "username": "orion",
        "email": "orion@x.com",
        "password": hash_password("Hashed123", rounds=4),
        "roles": "user",
    },
]

LEGACY_EVENTS = [
    {
        "id": 7,
        "eventName": "Perseids",
        "eventDate": "2024-08-12",
        "startTime": "21:00",
        "endTime": "23:30",
        "location": "Observatory Hill",
        "description": "Meteor shower watch",
        "participantsLimit": "30",
    },
]


class LegacyTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.settings = Settings(
            _env_file=None,
            DATA_DIR=self.data_dir / "store",
            BCRYPT_ROUNDS=4,
            JWT_SECRET=SecretStr("test-secret"),
        )
        self.stores = build_stores(self.settings)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class TestConvert(LegacyTestCase):
    def test_plaintext_password_is_hashed(self) -> None:
        user = convert_legacy_user(LEGACY_USERS[0], self.settings)
        self.assertTrue(is_password_hash(user["password_hash"]))
        self.assertTrue(verify_password("Plaintext1", user["password_hash"]))
        self.assertEqual(user["id"], "65a1f0c2e4b0a1b2c3d4e5f6")
        self.assertEqual(user["role"], "admin")
        self.assertEqual(user["created_at"], "2024-03-01T20:00:00+00:00")
        self.assertEqual(user["updated_at"], user["created_at"])

    def test_existing_hash_kept(self) -> None:
        user = convert_legacy_user(LEGACY_USERS[1], self.settings)
        self.assertEqual(user["password_hash"], LEGACY_USERS[1]["password"])

    def test_unknown_role_becomes_user(self) -> None:
        user = convert_legacy_user({**LEGACY_USERS[0], "roles": "moderator"}, self.settings)
        self.assertEqual(user["role"], "user")

    def test_user_without_password_rejected(self) -> None:
        with self.assertRaises(LegacyRecordError):
            convert_legacy_user({"username": "x", "email": "x@x.com"}, self.settings)

    def test_display_timestamps_converted_from_singapore_time(self) -> None:
        raw = {**LEGACY_USERS[0], "createdAt": "19/10/2026, 10:00:00 am", "updatedAt": "19/10/2026, 9:30:00 pm"}
        user = convert_legacy_user(raw, self.settings)
        self.assertEqual(user["created_at"], "2026-10-19T02:00:00+00:00")
        self.assertEqual(user["updated_at"], "2026-10-19T13:30:00+00:00")

    def test_epoch_millis_timestamp(self) -> None:
        raw = {**LEGACY_USERS[0], "createdAt": {"$date": {"$numberLong": "1700000000000"}}}
        user = convert_legacy_user(raw, self.settings)
        self.assertEqual(user["created_at"], "2023-11-14T22:13:20+00:00")

    def test_unrecognised_timestamp_rejected(self) -> None:
        with self.assertRaises(LegacyRecordError):
            convert_legacy_user({**LEGACY_USERS[0], "createdAt": "sometime last year"}, self.settings)

    def test_email_domain_lowercased(self) -> None:
        user = convert_legacy_user({**LEGACY_USERS[0], "email": "Stella@X.COM"}, self.settings)
        self.assertEqual(user["email"], "Stella@x.com")

    def test_event_fields_mapped(self) -> None:
        event = convert_legacy_event(LEGACY_EVENTS[0])
        self.assertEqual(event["event_name"], "Perseids")
        self.assertEqual(event["participants_limit"], 30)
        self.assertNotIn("id", event)

    def test_event_with_bad_limit_rejected(self) -> None:
        with self.assertRaises(LegacyRecordError):
            convert_legacy_event({**LEGACY_EVENTS[0], "participantsLimit": "many"})


class TestImport(LegacyTestCase):
    def test_imported_users_can_log_in(self) -> None:
        result = import_users(self.stores.users, LEGACY_USERS, self.settings)
        self.assertEqual((result.imported, result.skipped), (2, 0))
        self.assertEqual(authenticate(self.stores.users, "stella", "Plaintext1")["role"], "admin")
        self.assertEqual(authenticate(self.stores.users, "orion@x.com", "Hashed123")["username"], "orion")
        for user in self.stores.users.list_all():
            self.assertNotIn("password", user)

    def test_rerun_skips_existing(self) -> None:
        import_users(self.stores.users, LEGACY_USERS, self.settings)
        import_events(self.stores.events, LEGACY_EVENTS)
        again = import_users(self.stores.users, LEGACY_USERS, self.settings)
        events_again = import_events(self.stores.events, LEGACY_EVENTS)
        self.assertEqual((again.imported, again.skipped), (0, 2))
        self.assertEqual((events_again.imported, events_again.skipped), (0, 1))
        self.assertEqual(again.errors, [])
        self.assertEqual(len(self.stores.users.list_all()), 2)

    def test_invalid_records_reported(self) -> None:
        result = import_users(
            self.stores.users, [LEGACY_USERS[1], "not-an-object", {"username": "x"}], self.settings
        )
        self.assertEqual((result.imported, result.skipped), (1, 2))
        self.assertEqual(len(result.errors), 2)
        self.assertTrue(result.errors[0].startswith("user[1]"))

    def test_events_get_store_ids(self) -> None:
        result = import_events(self.stores.events, LEGACY_EVENTS)
        self.assertEqual(result.imported, 1)
        self.assertEqual(self.stores.events.find_unique("event_name", "Perseids")["id"], 1)


class TestImportIntoSql(LegacyTestCase):
    """The SQL backend refuses anything it cannot store; such records are skipped, not fatal."""

    def setUp(self) -> None:
        super().setUp()
        self.settings = Settings(
            _env_file=None,
            STORE_BACKEND="sql",
            DATABASE_URL=f"sqlite:///{self.data_dir / 'stargazers.db'}",
            BCRYPT_ROUNDS=4,
            JWT_SECRET=SecretStr("test-secret"),
        )
        self.stores = build_stores(self.settings)
        Base.metadata.create_all(self.stores.engine)

    def tearDown(self) -> None:
        self.stores.engine.dispose()
        super().tearDown()

    def test_bad_record_does_not_stop_the_rest(self) -> None:
        raw = [
            {**LEGACY_USERS[0], "createdAt": "not a date"},
            {**LEGACY_USERS[0], "_id": {"$oid": "b0b"}, "username": "bob", "email": "bob@x.com",
             "createdAt": "19/10/2026, 10:00:00 am"},
            LEGACY_USERS[1],
        ]
        result = import_users(self.stores.users, raw, self.settings)
        self.assertEqual((result.imported, result.skipped), (2, 1))
        self.assertTrue(result.errors[0].startswith("user[0]"))
        bob = self.stores.users.find_unique("username", "bob")
        self.assertEqual(bob["created_at"], "2026-10-19T02:00:00+00:00")

    def test_store_rejection_is_reported(self) -> None:
        with patch.object(
            self.stores.users, "insert_if_absent", side_effect=ValidationError("created_at: invalid timestamp")
        ):
            result = import_users(self.stores.users, LEGACY_USERS[:1], self.settings)
        self.assertEqual((result.imported, result.skipped), (0, 1))
        self.assertEqual(result.errors, ["user[0]: created_at: invalid timestamp"])

    def test_command_imports_into_sql(self) -> None:
        users = self.data_dir / "users.json"
        users.write_text(
            json.dumps([{**LEGACY_USERS[0], "createdAt": "garbage"}, LEGACY_USERS[1]]), encoding="utf-8"
        )
        with patch("stargazers.scripts.migrate_legacy.get_settings", return_value=self.settings):
            self.assertEqual(migrate_legacy.main([str(users)]), 0)
        self.assertEqual([u["username"] for u in self.stores.users.list_all()], ["orion"])


class TestMigrateCommand(LegacyTestCase):
    def _write(self, name: str, data: object) -> Path:
        path = self.data_dir / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def test_main_imports_both_files(self) -> None:
        users = self._write("users.json", LEGACY_USERS)
        events = self._write("events.json", LEGACY_EVENTS)
        with patch("stargazers.scripts.migrate_legacy.get_settings", return_value=self.settings):
            self.assertEqual(migrate_legacy.main([str(users), str(events)]), 0)
        self.assertEqual(len(self.stores.users.list_all()), 2)
        self.assertEqual(len(self.stores.events.list_all()), 1)

    def test_main_rejects_unreadable_input(self) -> None:
        not_array = self._write("users.json", {"users": LEGACY_USERS})
        with patch("stargazers.scripts.migrate_legacy.get_settings", return_value=self.settings):
            self.assertEqual(migrate_legacy.main([str(not_array)]), 1)
            self.assertEqual(migrate_legacy.main([str(self.data_dir / "missing.json")]), 1)
        self.assertEqual(self.stores.users.list_all(), [])


if __name__ == "__main__":
    unittest.main()
