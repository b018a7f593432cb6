"""SQLAlchemy model for projects and their user roster."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, Table, Text
from sqlalchemy.orm import relationship

from ..db.session import Base
from ..db.types import UTCDateTime

# Many-to-many roster: a user may only log time against projects listed here.
user_projects = Table(
    "user_projects",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Project(Base):
    """Named unit of work created by an admin."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=lambda: datetime.now(tz=timezone.utc))

    users = relationship(
        "User",
        secondary=user_projects,
        back_populates="projects",
        order_by="User.name",
    )
    time_logs = relationship("TimeLog", back_populates="project")


__all__ = ["Project", "user_projects"]
