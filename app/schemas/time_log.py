"""Pydantic schemas for time logs, timers and paginated listings.

Create/update bodies keep every field optional so that missing values reach
the lifecycle service, which reports them as a single validation error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .project import ProjectRef
from .user import UserRef


class TimeLogCreate(CamelModel):
    project_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None


class TimeLogUpdate(CamelModel):
    project_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None


class TimerStart(CamelModel):
    project_id: Optional[int] = None
    description: Optional[str] = None


class TimeLogOut(CamelModel):
    id: int
    user_id: int
    project_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    description: str
    duration: int
    created_at: datetime
    project: Optional[ProjectRef] = None


class TimeLogDetail(TimeLogOut):
    user: Optional[UserRef] = None


class TimerStatus(CamelModel):
    active_timer: Optional[TimeLogOut] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TimeLogPage(CamelModel):
    time_logs: list[TimeLogOut] = Field(default_factory=list)
    pagination: Pagination
