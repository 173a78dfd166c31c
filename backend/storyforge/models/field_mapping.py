"""Seed lookup tables: ADO field references and status templates."""
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from storyforge.database import Base


class FieldMapping(Base):
    """(work item type, logical field) -> ADO field reference name."""

    __tablename__ = "field_mappings"
    __table_args__ = (UniqueConstraint("work_item_type", "logical_field", name="uq_field_mapping"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    work_item_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    logical_field: Mapped[str] = mapped_column(String(100), nullable=False)
    ado_field_name: Mapped[str] = mapped_column(String(255), nullable=False)


class StatusTemplate(Base):
    __tablename__ = "status_templates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sections: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    format_style: Mapped[str] = mapped_column(String(50), nullable=False, default="bullets")
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
