from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from engagement_service.models.base import Base


class CreatedDateMixin:
    """Audit column present on every table."""
    created_date: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class View(CreatedDateMixin, Base):
    """A named application section whose viewing time is tracked."""

    __tablename__ = "tbl_views_available"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    view_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    engagement_logs: Mapped[list["EngagementLog"]] = relationship("EngagementLog", back_populates="view")


class EngagementLog(CreatedDateMixin, Base):
    """One recorded (view, duration, timestamp) observation for a user."""

    __tablename__ = "tbl_engagement_logs"
    __table_args__ = (
        CheckConstraint(
            "duration_seconds >= 0 AND duration_seconds <= 86400",
            name="ck_engagement_logs_duration_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    view_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_views_available.id", ondelete="RESTRICT"), nullable=False
    )
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    view: Mapped[View] = relationship("View", back_populates="engagement_logs")


Index("ix_engagement_logs_user_viewed_at", EngagementLog.user_id, EngagementLog.viewed_at)
