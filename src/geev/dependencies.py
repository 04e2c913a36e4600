"""Shared FastAPI dependencies.

The application's long-lived objects are built once in the lifespan and
parked on ``app.state``; these accessors hand them to route handlers.
"""

from fastapi import Request

from geev.analytics.service import EventLog
from geev.auth.directory import UserDirectory
from geev.drafts.service import DraftStore
from geev.storage import KeyValueStorage
from geev.store.provider import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_directory(request: Request) -> UserDirectory:
    return request.app.state.directory


def get_event_log(request: Request) -> EventLog:
    return request.app.state.event_log


def get_storage(request: Request) -> KeyValueStorage:
    return request.app.state.storage


def get_drafts(request: Request) -> DraftStore:
    return request.app.state.drafts
