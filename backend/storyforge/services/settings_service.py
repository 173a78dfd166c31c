"""ADO connection settings stored in the singleton ``settings`` row."""
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.config import Settings
from storyforge.exceptions import AdoNotConfiguredError
from storyforge.models.app_settings import SETTINGS_ROW_ID, AppSettings
from storyforge.schemas.settings import SanitizedSettings, SettingsSave
from storyforge.services.ado_client import AdoClient

logger = logging.getLogger(__name__)

DEFAULT_WORK_ITEM_TYPES: tuple[str, ...] = ("Epic", "Issue", "Task")


async def get_settings_row(db: AsyncSession) -> AppSettings | None:
    return await db.get(AppSettings, SETTINGS_ROW_ID)


async def save_settings(db: AsyncSession, data: SettingsSave) -> AppSettings:
    """Upsert row id=1. Detected work item types survive a re-save."""
    row = await get_settings_row(db)
    if row is None:
        row = AppSettings(id=SETTINGS_ROW_ID)
        db.add(row)
    row.ado_org_url = data.ado_org_url.rstrip("/")
    row.ado_project = data.ado_project
    row.ado_pat = data.ado_pat
    row.area_path = data.area_path or None
    row.iteration_path = data.iteration_path or None
    row.updated_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(row)
    logger.info("Settings saved for %s/%s", row.ado_org_url, row.ado_project)
    return row


def sanitize(row: AppSettings) -> SanitizedSettings:
    return SanitizedSettings(
        id=row.id,
        ado_org_url=row.ado_org_url,
        ado_project=row.ado_project,
        ado_pat_configured=bool(row.ado_pat),
        area_path=row.area_path,
        iteration_path=row.iteration_path,
        available_work_item_types=row.available_work_item_types,
        process_template=row.process_template,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


async def update_work_item_types(db: AsyncSession, type_names: list[str], process_template: str) -> None:
    row = await get_settings_row(db)
    if row is None:
        raise AdoNotConfiguredError()
    row.available_work_item_types = list(type_names)
    row.process_template = process_template
    row.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("Updated work item types: %s", ", ".join(type_names))
    logger.info("Detected process template: %s", process_template)


def available_work_item_types(row: AppSettings | None) -> list[str]:
    """Detected types, or the Basic template's types when nothing was detected."""
    if row is not None and row.available_work_item_types:
        return list(row.available_work_item_types)
    return list(DEFAULT_WORK_ITEM_TYPES)


def build_ado_client(row: AppSettings | None, settings: Settings, **kwargs) -> AdoClient:
    if row is None or not row.is_configured:
        raise AdoNotConfiguredError()
    return AdoClient(
        row.ado_org_url,
        row.ado_project,
        row.ado_pat,
        api_version=settings.ado_api_version,
        timeout=settings.ado_timeout_seconds,
        batch_size=settings.ado_batch_size,
        **kwargs,
    )
