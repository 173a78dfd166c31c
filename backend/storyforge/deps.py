"""Shared FastAPI dependencies."""
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.config import Settings, get_settings
from storyforge.database import get_db
from storyforge.models.app_settings import AppSettings
from storyforge.services import settings_service
from storyforge.services.ado_client import AdoClient


async def get_settings_row(db: Annotated[AsyncSession, Depends(get_db)]) -> AppSettings | None:
    return await settings_service.get_settings_row(db)


async def get_ado_client(
    row: Annotated[AppSettings | None, Depends(get_settings_row)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncIterator[AdoClient]:
    """ADO client for the stored settings; 400 when they are incomplete."""
    client = settings_service.build_ado_client(row, settings)
    try:
        yield client
    finally:
        await client.aclose()


async def get_work_item_types(row: Annotated[AppSettings | None, Depends(get_settings_row)]) -> list[str]:
    return settings_service.available_work_item_types(row)


async def get_area_path(row: Annotated[AppSettings | None, Depends(get_settings_row)]) -> str | None:
    return row.area_path if row is not None else None
