from __future__ import annotations

from typing import Optional

from pydantic import Field

from .base import CamelModel


class ProjectStat(CamelModel):
    project_id: int
    project_name: Optional[str] = None
    total_minutes: int


class DashboardStats(CamelModel):
    today_minutes: int = 0
    week_minutes: int = 0
    month_minutes: int = 0
    total_minutes: int = 0
    project_stats: list[ProjectStat] = Field(default_factory=list)
