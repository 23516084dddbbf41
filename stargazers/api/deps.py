"""Request-scoped accessors for the settings and stores built by create_app."""

from fastapi import Request

from stargazers.core.config import Settings
from stargazers.store import RecordStore, Stores


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def get_user_store(request: Request) -> RecordStore:
    return request.app.state.stores.users


def get_event_store(request: Request) -> RecordStore:
    return request.app.state.stores.events
