"""Print tables, settings columns and seed counts of the configured database."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import inspect, select, text
from sqlalchemy.ext.asyncio import create_async_engine

from storyforge.config import get_settings

SETTINGS_COLUMNS = (
    "id, ado_org_url, ado_project, ado_pat, area_path, iteration_path, "
    "available_work_item_types, process_template, created_at, updated_at"
)


async def diagnose():
    engine = create_async_engine(get_settings().database_url)
    print("--- Database Diagnostics ---")
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda c: inspect(c).get_table_names())
        print("Tables:", tables)

        if "settings" in tables:
            columns = await conn.run_sync(lambda c: [col["name"] for col in inspect(c).get_columns("settings")])
            print("Settings columns:", columns)
            try:
                row = (await conn.execute(text(f"SELECT {SETTINGS_COLUMNS} FROM settings WHERE id = 1"))).first()
                print("Settings read:", "found" if row else "not found")
            except Exception as e:
                print("Settings read failed:", e)
        else:
            print("settings table missing!")

        for table in ("field_mappings", "status_templates", "work_items_cache", "innovation_items"):
            if table not in tables:
                print(f"{table} table missing!")
                continue
            count = (await conn.execute(select(text("COUNT(*)")).select_from(text(table)))).scalar_one()
            print(f"{table}: {count} rows")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(diagnose())
