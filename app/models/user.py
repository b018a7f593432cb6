"""SQLAlchemy model for people who log time or administer projects."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base
from ..db.types import UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class User(Base):
    """A registered account. ``role`` is fixed when the account is created."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('USER', 'ADMIN')", name="ck_users_role"),)

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    password_hash = Column(Text, nullable=False)
    role = Column(String(16), nullable=False, default="USER")
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    projects = relationship(
        "Project",
        secondary="user_projects",
        back_populates="users",
        order_by="Project.name",
    )
    time_logs = relationship("TimeLog", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


__all__ = ["User"]
