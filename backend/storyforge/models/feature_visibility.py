"""Per-feature visibility overrides for the roadmap and stage-gate views."""
from sqlalchemy import Boolean, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from storyforge.database import Base


class FeatureVisibility(Base):
    """Sparse: a feature without a row is visible."""

    __tablename__ = "feature_visibility"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    feature_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
