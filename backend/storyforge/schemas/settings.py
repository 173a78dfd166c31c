"""ADO connection settings schemas. Keys are snake_case, as stored."""
from datetime import datetime

from pydantic import BaseModel, Field


class SettingsSave(BaseModel):
    ado_org_url: str = Field(..., min_length=1, max_length=500)
    ado_project: str = Field(..., min_length=1, max_length=255)
    ado_pat: str = Field(..., min_length=1)
    area_path: str | None = None
    iteration_path: str | None = None


class SanitizedSettings(BaseModel):
    """Settings as exposed to clients: the PAT never leaves the server."""

    id: int
    ado_org_url: str | None
    ado_project: str | None
    ado_pat_configured: bool
    area_path: str | None
    iteration_path: str | None
    available_work_item_types: list[str] | None
    process_template: str | None
    created_at: datetime | None
    updated_at: datetime | None


class SettingsResponse(BaseModel):
    configured: bool = True
    settings: SanitizedSettings


class SettingsSaveResponse(BaseModel):
    success: bool = True
    message: str = "Settings saved successfully"
    settings: SanitizedSettings


class AdoProjectInfo(BaseModel):
    name: str | None = None
    id: str | None = None
    state: str | None = None
    url: str | None = None


class ConnectionTestResult(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
    status: int | None = None
    project: AdoProjectInfo | None = None
    work_item_types: list[str] | None = Field(None, alias="workItemTypes")
    process_template: str | None = Field(None, alias="processTemplate")
    work_item_types_error: str | None = Field(None, alias="workItemTypesError")

    class Config:
        populate_by_name = True
