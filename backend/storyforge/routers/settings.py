"""ADO connection settings API routes."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.config import Settings, get_settings
from storyforge.database import get_db
from storyforge.exceptions import AdoError
from storyforge.schemas.settings import (
    AdoProjectInfo,
    ConnectionTestResult,
    SettingsResponse,
    SettingsSave,
    SettingsSaveResponse,
)
from storyforge.services import settings_service
from storyforge.services.ado_client import infer_process_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.post("", response_model=SettingsSaveResponse)
async def save_settings(
    data: SettingsSave,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    row = await settings_service.save_settings(db, data)
    return SettingsSaveResponse(settings=settings_service.sanitize(row))


@router.get("", response_model=SettingsResponse, responses={404: {"description": "Settings not configured"}})
async def get_connection_settings(db: Annotated[AsyncSession, Depends(get_db)]):
    row = await settings_service.get_settings_row(db)
    if row is None:
        return JSONResponse(status_code=404, content={"configured": False, "message": "Settings not configured"})
    return SettingsResponse(settings=settings_service.sanitize(row))


@router.post("/test-ado", response_model=ConnectionTestResult, response_model_exclude_none=True)
async def test_ado_connection(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Check the stored connection and record the project's work item types.

    Always answers 200; failures are reported in the body.
    """
    row = await settings_service.get_settings_row(db)
    try:
        client = settings_service.build_ado_client(row, settings)
    except AdoError as e:
        return ConnectionTestResult(success=False, error=str(e))

    async with client:
        try:
            project = await client.test_connection()
        except AdoError as e:
            logger.warning("ADO connection failed: %s", e)
            return ConnectionTestResult(success=False, error=str(e), status=getattr(e, "status", None))

        result = ConnectionTestResult(
            success=True,
            message="Successfully connected to Azure DevOps",
            project=AdoProjectInfo(**project),
        )
        try:
            types = await client.get_work_item_types()
        except AdoError as e:
            logger.warning("Failed to fetch work item types: %s", e)
            result.work_item_types_error = "Could not fetch work item types"
            return result

    type_names = [t["name"] for t in types if t.get("name")]
    if type_names:
        process_template = infer_process_template(type_names)
        await settings_service.update_work_item_types(db, type_names, process_template)
        result.work_item_types = type_names
        result.process_template = process_template
    return result
