"""SQLAlchemy model for time entries.

A row with ``end_time IS NULL`` is a running timer. The partial unique index
below allows at most one such row per user, so two racing "start timer"
requests cannot both insert.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import relationship

from ..db.session import Base
from ..db.types import UTCDateTime

ACTIVE_TIMER_INDEX = "ux_time_logs_one_active_per_user"


class TimeLog(Base):
    __tablename__ = "time_logs"
    __table_args__ = (
        CheckConstraint("end_time IS NULL OR end_time > start_time", name="ck_time_logs_range"),
        CheckConstraint("duration >= 0", name="ck_time_logs_duration"),
        Index(
            ACTIVE_TIMER_INDEX,
            "user_id",
            unique=True,
            sqlite_where=text("end_time IS NULL"),
            postgresql_where=text("end_time IS NULL"),
        ),
        Index("ix_time_logs_user_start", "user_id", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=True)
    description = Column(Text, nullable=False)
    # Whole minutes; 0 while the timer is running.
    duration = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(tz=timezone.utc))

    user = relationship("User", back_populates="time_logs")
    project = relationship("Project", back_populates="time_logs")

    @property
    def is_active(self) -> bool:
        return self.end_time is None


__all__ = ["ACTIVE_TIMER_INDEX", "TimeLog"]
