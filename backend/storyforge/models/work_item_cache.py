"""Point-in-time snapshot of recent ADO work items, used for duplicate search."""
from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storyforge.database import Base


class CachedWorkItem(Base):
    """Replaced wholesale on every refresh; never written back to ADO."""

    __tablename__ = "work_items_cache"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_date: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True, default="")
    area_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    iteration_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    last_fetched: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
