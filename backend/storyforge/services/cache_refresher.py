"""Periodic work items cache refresh, run as one asyncio task in the app process."""
import asyncio
import logging

from storyforge.config import Settings
from storyforge.database import Database
from storyforge.exceptions import AdoNotConfiguredError
from storyforge.services import cache_service, settings_service

logger = logging.getLogger(__name__)


class CacheRefresher:
    """Refreshes the duplicate-search cache after a short delay, then on a fixed interval.

    Failures are logged and the loop keeps going: an unconfigured or
    unreachable ADO organization is normal at startup.
    """

    def __init__(self, database: Database, settings: Settings) -> None:
        self.database = database
        self.settings = settings
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-refresher")
        logger.info(
            "Cache refresh scheduled every %ss (first run in %ss)",
            self.settings.cache_refresh_interval_seconds,
            self.settings.cache_refresh_startup_delay_seconds,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cache refresher stopped")

    async def refresh_once(self) -> int:
        """One refresh in its own transaction. Returns the number of cached items."""
        async with self.database.session() as db:
            row = await settings_service.get_settings_row(db)
            async with settings_service.build_ado_client(row, self.settings) as client:
                return await cache_service.refresh_work_items_cache(
                    db,
                    client,
                    settings_service.available_work_item_types(row),
                    months=self.settings.cache_history_months,
                    area_path=row.area_path,
                )

    async def _run(self) -> None:
        await asyncio.sleep(self.settings.cache_refresh_startup_delay_seconds)
        while True:
            try:
                await self.refresh_once()
            except AdoNotConfiguredError:
                logger.warning("Cache refresh skipped: ADO settings not configured")
            except Exception as e:
                logger.warning("Cache refresh failed: %s", e, exc_info=True)
            await asyncio.sleep(self.settings.cache_refresh_interval_seconds)
