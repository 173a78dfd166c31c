"""Azure DevOps connection settings (singleton row)."""
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storyforge.database import Base

SETTINGS_ROW_ID = 1


class AppSettings(Base):
    """Connection details for the ADO organization/project; always id=1."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(primary_key=True, default=SETTINGS_ROW_ID)
    ado_org_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ado_project: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ado_pat: Mapped[str | None] = mapped_column(Text, nullable=True)
    area_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    iteration_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    available_work_item_types: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)
    process_template: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_configured(self) -> bool:
        return bool(self.ado_org_url and self.ado_project and self.ado_pat)
