"""
Tests: application wiring, background refresh and logging.

Covers:
    - health endpoint
    - request validation errors reshaped to {success, error, field}
    - error body documented in the OpenAPI schema
    - CacheRefresher: refresh with stored settings, skip when unconfigured
    - logging formatters
"""
import json
import logging

import pytest

from storyforge import __version__
from storyforge.exceptions import AdoNotConfiguredError
from storyforge.logging_config import JSONFormatter, configure_logging
from storyforge.schemas.settings import SettingsSave
from storyforge.services import cache_service, settings_service
from storyforge.services.cache_refresher import CacheRefresher


async def test_health(client):
    response = await client.get("/api/health")
    assert response.json() == {"status": "ok", "version": __version__}


async def test_path_validation_error_shape(client):
    response = await client.get("/api/innovation/items/not-a-number")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["field"] == "item_id"


async def test_openapi_documents_error_body(client):
    schema = (await client.get("/openapi.json")).json()
    assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {"success", "error", "field"}
    responses = schema["paths"]["/api/innovation/items/{item_id}"]["get"]["responses"]
    assert responses["404"]["content"]["application/json"]["schema"]["$ref"] == "#/components/schemas/ErrorResponse"


# ═════════════════════════════════════════════════════════════════════════════
# CacheRefresher
# ═════════════════════════════════════════════════════════════════════════════

async def test_refresh_once_requires_settings(database, settings):
    refresher = CacheRefresher(database, settings)
    with pytest.raises(AdoNotConfiguredError):
        await refresher.refresh_once()


async def test_refresh_once_uses_stored_settings(database, settings, fake_ado, monkeypatch):
    async with database.session() as db:
        await settings_service.save_settings(db, SettingsSave(
            ado_org_url="https://dev.azure.com/contoso", ado_project="Web", ado_pat="pat", area_path="Web\\Team",
        ))
    fake_ado.add(id=1, type="Task", title="Wire up payments", state="New")
    monkeypatch.setattr(settings_service, "build_ado_client", lambda row, cfg: _Closing(fake_ado))

    count = await CacheRefresher(database, settings).refresh_once()

    assert count == 1
    assert "UNDER 'Web\\Team'" in fake_ado.queries[-1]
    async with database.session() as db:
        assert (await cache_service.cache_stats(db)).total == 1


async def test_start_and_stop(database, settings):
    refresher = CacheRefresher(database, settings)
    refresher.start()
    assert refresher.running
    await refresher.stop()
    assert not refresher.running


class _Closing:
    """Async context manager around the fake client, like AdoClient."""

    def __init__(self, client):
        self.client = client

    async def __aenter__(self):
        return self.client

    async def __aexit__(self, *exc_info):
        await self.client.aclose()


# ═════════════════════════════════════════════════════════════════════════════
# Logging
# ═════════════════════════════════════════════════════════════════════════════

def test_json_formatter_includes_extra_ids():
    record = logging.LogRecord("storyforge.test", logging.INFO, __file__, 10, "Moved %s", (5,), None)
    record.work_item_id = 5
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "Moved 5"
    assert entry["level"] == "INFO"
    assert entry["work_item_id"] == 5


def test_configure_logging_installs_single_handler(settings):
    configure_logging(settings)
    configure_logging(settings)
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING
