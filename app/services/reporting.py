from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import asc, desc, func, select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import InternalError, ValidationError
from ..crud.time_logs import SORT_COLUMNS, count_user_logs, list_logs, list_user_logs
from ..models.project import Project
from ..models.time_log import TimeLog
from ..models.user import User
from .timecalc import Window, day_window, month_window, week_window


@dataclass
class PersonalSummary:
    today_minutes: int = 0
    week_minutes: int = 0
    month_minutes: int = 0
    total_minutes: int = 0
    project_stats: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class LogPage:
    time_logs: List[TimeLog]
    pagination: Dict[str, int]


def _closed_minutes(db: Session, user_id: int, window: Window | None = None) -> int:
    """Sum of durations for the user's closed logs starting inside ``window``.

    Running timers (NULL end) are excluded so they count as 0.
    """

    stmt = select(func.coalesce(func.sum(TimeLog.duration), 0)).where(
        TimeLog.user_id == user_id,
        TimeLog.end_time.is_not(None),
    )
    if window is not None:
        stmt = stmt.where(TimeLog.start_time >= window.start, TimeLog.start_time < window.end)
    return int(db.scalar(stmt) or 0)


def _project_totals(db: Session, user_id: int) -> List[Dict[str, Any]]:
    total = func.sum(TimeLog.duration).label("total_minutes")
    stmt = (
        select(TimeLog.project_id, Project.name, total)
        .join(Project, Project.id == TimeLog.project_id)
        .where(TimeLog.user_id == user_id, TimeLog.end_time.is_not(None))
        .group_by(TimeLog.project_id, Project.name)
        .order_by(desc(total), asc(TimeLog.project_id))
    )
    return [
        {"project_id": project_id, "project_name": name, "total_minutes": int(minutes or 0)}
        for project_id, name, minutes in db.execute(stmt).all()
    ]


def personal_summary(db: Session, user: User, now: datetime | None = None) -> PersonalSummary:
    """Dashboard totals for ``user`` as of ``now``.

    Windows are half-open ``[start, end)`` ranges on ``start_time``, computed in
    the configured local timezone; the week begins on ``settings.WEEK_START``.
    """

    moment = now or datetime.now(tz=timezone.utc)
    if moment.tzinfo is None:
        raise InternalError("Dashboard clock must be timezone-aware")
    return PersonalSummary(
        today_minutes=_closed_minutes(db, user.id, day_window(moment, settings.TZ)),
        week_minutes=_closed_minutes(db, user.id, week_window(moment, settings.TZ, settings.WEEK_START)),
        month_minutes=_closed_minutes(db, user.id, month_window(moment, settings.TZ)),
        total_minutes=_closed_minutes(db, user.id),
        project_stats=_project_totals(db, user.id),
    )


def filtered_logs(
    db: Session,
    *,
    user_id: int | None = None,
    project_id: int | None = None,
    sort: str | None = None,
) -> List[TimeLog]:
    """Admin view across all users; rows come back with ``user`` and ``project`` loaded."""

    if sort is not None and sort not in SORT_COLUMNS:
        raise ValidationError(f"sort must be one of: {', '.join(SORT_COLUMNS)}")
    return list_logs(db, user_id=user_id, project_id=project_id, sort=sort)


def paginated_user_logs(db: Session, user: User, page: int = 1, limit: int | None = None) -> LogPage:
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if limit < 1 or limit > settings.MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {settings.MAX_PAGE_SIZE}")

    total = count_user_logs(db, user.id)
    logs = list_user_logs(db, user.id, limit=limit, offset=(page - 1) * limit)
    return LogPage(
        time_logs=logs,
        pagination={
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    )


__all__ = ["LogPage", "PersonalSummary", "filtered_logs", "paginated_user_logs", "personal_summary"]
