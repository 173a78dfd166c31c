"""Create tables and seed field mappings / status templates."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import func, select

from storyforge.config import get_settings
from storyforge.database import Database
from storyforge.logging_config import configure_logging
from storyforge.models.field_mapping import FieldMapping, StatusTemplate


async def init():
    settings = get_settings()
    configure_logging(settings)
    database = Database(settings.database_url)
    await database.init()
    async with database.session() as db:
        mappings = (await db.execute(select(func.count()).select_from(FieldMapping))).scalar_one()
        templates = (await db.execute(select(func.count()).select_from(StatusTemplate))).scalar_one()
    await database.close()
    print(f"Database ready: {mappings} field mappings, {templates} status templates")


if __name__ == "__main__":
    asyncio.run(init())
