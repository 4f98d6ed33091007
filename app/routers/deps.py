"""Shared FastAPI dependencies (settings, database, converter, owner id)."""

from fastapi import Depends, Header, Request

from app.core.config import Settings, get_settings
from app.core.logging import bind_owner
from app.db.dal import Database
from app.services.currency import CurrencyConverter


def get_app_settings(request: Request) -> Settings:
    # create_app stores the (possibly test-injected) settings on app.state
    return getattr(request.app.state, "settings", None) or get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_converter(request: Request) -> CurrencyConverter:
    # built once by create_app
    return request.app.state.converter


async def get_owner_id(
    owner_id: int = Header(
        ...,
        alias="X-Owner-Id",
        gt=0,
        description="Opaque owner identifier; the caller is already authorized",
    ),
) -> int:
    bind_owner(owner_id)
    return owner_id
