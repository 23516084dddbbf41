"""
Import the legacy stargazing JSON exports into the configured record store,
hashing any plaintext passwords. Run from project root:

  python -m stargazers.scripts.migrate_legacy stargazing.users.json [stargazing.events.json]

Safe to re-run: users and events that already exist are skipped.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from stargazers.core.config import get_settings
from stargazers.core.errors import StoreError
from stargazers.services.legacy import import_events, import_users
from stargazers.store import build_stores

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def _load_array(path: Path) -> list[Any]:
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def main(argv: list[str] | None = None) -> int:
    """Run the legacy import; returns non-zero if an input file cannot be read."""
    parser = argparse.ArgumentParser(description="Import legacy stargazing users/events JSON.")
    parser.add_argument("users_json", type=Path, help="Legacy users export")
    parser.add_argument("events_json", type=Path, nargs="?", help="Legacy events export")
    args = parser.parse_args(argv)

    try:
        raw_users = _load_array(args.users_json)
        raw_events = _load_array(args.events_json) if args.events_json else []
    except (OSError, ValueError) as e:
        logger.error("Cannot read legacy export: %s", e)
        return 1

    settings = get_settings()
    stores = build_stores(settings)
    try:
        users = import_users(stores.users, raw_users, settings)
        events = import_events(stores.events, raw_events)
    except StoreError as e:
        logger.exception("Legacy import failed: %s", e.message)
        return 1

    logger.info(
        "Legacy import completed: users_imported=%s users_skipped=%s events_imported=%s events_skipped=%s",
        users.imported,
        users.skipped,
        events.imported,
        events.skipped,
    )
    for error in users.errors + events.errors:
        logger.warning("Not imported: %s", error)
    return 0


if __name__ == "__main__":
    sys.exit(main())
