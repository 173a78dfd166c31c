"""Innovation funnel items."""
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from storyforge.database import Base


class InnovationItem(Base):
    """Idea moving through the innovation funnel, ranked within its stage."""

    __tablename__ = "innovation_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str] = mapped_column(String(50), nullable=False, default="Intake", index=True)
    stage_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ado_feature_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    rice_reach: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rice_impact: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-3
    rice_confidence: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 0-100
    rice_effort: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rice_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    roi_estimate: Mapped[str | None] = mapped_column(String(255), nullable=True)
    roi_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    requestor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)
    status_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    stage_changed_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
