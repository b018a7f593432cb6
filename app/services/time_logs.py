"""Time log lifecycle: manual entries, edits, deletes and the start/stop timer.

Every function receives the acting ``User`` explicitly. Durations are always
derived from the timestamps through ``compute_duration``; nothing here trusts
a duration supplied from outside.

State of a single log::

    Active (end_time NULL) --stop_timer--> Closed (end_time set)

Closed logs can be edited but never reopened. Manual entries start Closed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import (
    AccessDenied,
    AlreadyRunning,
    NoActiveTimer,
    NotFound,
    OrderingError,
    ValidationError,
)
from ..crud.projects import get_assigned_project
from ..crud.time_logs import (
    close_active_log,
    delete_log as _delete_row,
    get_active_log,
    get_user_log,
    insert_log,
    save_log,
)
from ..models.time_log import TimeLog
from ..models.user import User
from .timecalc import compute_duration, parse_iso, to_utc

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("project_id", "start_time", "end_time", "description")
WIRE_NAMES = {
    "project_id": "projectId",
    "start_time": "startTime",
    "end_time": "endTime",
    "description": "description",
}
MIN_TIMER_SPAN = timedelta(seconds=1)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _log_event(event: str, log: TimeLog, **extra: Any) -> None:
    data = {"time_log_id": log.id, "user_id": log.user_id, "project_id": log.project_id}
    data.update(extra)
    logger.info(event, extra={"extra_data": data})


def _as_utc(value: str | datetime, field: str) -> datetime:
    try:
        parsed = parse_iso(value, settings.TZ)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{WIRE_NAMES[field]} is not a valid timestamp") from exc
    if parsed is None:
        raise ValidationError(f"{WIRE_NAMES[field]} is required")
    return to_utc(parsed)


def _ensure_ordered(start: datetime, end: datetime) -> None:
    if end <= start:
        raise OrderingError()


def _require_assigned(db: Session, user: User, project_id: int) -> None:
    if get_assigned_project(db, project_id, user.id) is None:
        raise AccessDenied()


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def create_manual(
    db: Session,
    user: User,
    *,
    project_id: int | None,
    start: str | datetime | None,
    end: str | datetime | None,
    description: str | None,
) -> TimeLog:
    if project_id is None or _blank(start) or _blank(end) or _blank(description):
        raise ValidationError("Missing required fields")
    start_at = _as_utc(start, "start_time")
    end_at = _as_utc(end, "end_time")
    _ensure_ordered(start_at, end_at)
    _require_assigned(db, user, project_id)

    log = insert_log(
        db,
        TimeLog(
            user_id=user.id,
            project_id=project_id,
            start_time=start_at,
            end_time=end_at,
            description=description.strip(),
            duration=compute_duration(start_at, end_at),
        ),
    )
    _log_event("time_log.created", log, duration=log.duration)
    return log


def start_timer(
    db: Session,
    user: User,
    *,
    project_id: int | None,
    description: str | None,
    now: datetime | None = None,
) -> TimeLog:
    """Open a timer for ``user``; at most one may be open per user.

    The pre-check gives the common case a clean error. The partial unique
    index on ``time_logs(user_id) WHERE end_time IS NULL`` settles races: the
    losing insert raises ``IntegrityError`` and is reported the same way.
    """

    if project_id is None or _blank(description):
        raise ValidationError("Project ID and description are required")
    _require_assigned(db, user, project_id)
    if get_active_log(db, user.id) is not None:
        raise AlreadyRunning()

    started_at = to_utc(now or _utcnow())
    log = TimeLog(
        user_id=user.id,
        project_id=project_id,
        start_time=started_at,
        end_time=None,
        description=description.strip(),
        duration=0,
    )
    try:
        insert_log(db, log)
    except IntegrityError as exc:
        db.rollback()
        if get_active_log(db, user.id) is not None:
            raise AlreadyRunning() from exc
        raise
    _log_event("timer.started", log)
    return log


def stop_timer(db: Session, user: User, *, now: datetime | None = None) -> TimeLog:
    active = get_active_log(db, user.id)
    if active is None:
        raise NoActiveTimer()

    ended_at = to_utc(now or _utcnow())
    if ended_at <= active.start_time:
        # Stopped within the same instant (or clock skew); keep end > start.
        ended_at = active.start_time + MIN_TIMER_SPAN
    duration = compute_duration(active.start_time, ended_at)
    if not close_active_log(db, active, end_time=ended_at, duration=duration):
        raise NoActiveTimer()
    _log_event("timer.stopped", active, duration=active.duration)
    return active


def timer_status(db: Session, user: User) -> TimeLog | None:
    return get_active_log(db, user.id)


def _moves_running_timer(log: TimeLog, changes: Mapping[str, Any]) -> bool:
    """True if ``changes`` would alter anything on a running timer besides its description."""

    if "end_time" in changes:
        return True
    if "project_id" in changes and changes["project_id"] != log.project_id:
        return True
    if "start_time" in changes and not _blank(changes["start_time"]):
        return _as_utc(changes["start_time"], "start_time") != log.start_time
    return False


def edit_log(db: Session, user: User, log_id: int, patch: Mapping[str, Any]) -> TimeLog:
    """Apply a partial update. Only keys present in ``patch`` are touched."""

    log = get_user_log(db, log_id, user.id)
    if log is None:
        raise NotFound("Time log not found")

    changes = {key: patch[key] for key in EDITABLE_FIELDS if key in patch}
    if log.is_active and _moves_running_timer(log, changes):
        raise ValidationError("Stop the running timer before changing its times or project")
    for key, value in changes.items():
        if _blank(value):
            raise ValidationError(f"{WIRE_NAMES[key]} cannot be empty")

    start_at = _as_utc(changes["start_time"], "start_time") if "start_time" in changes else log.start_time
    end_at = _as_utc(changes["end_time"], "end_time") if "end_time" in changes else log.end_time
    if end_at is not None:
        _ensure_ordered(start_at, end_at)

    new_project_id = changes.get("project_id", log.project_id)
    if new_project_id != log.project_id:
        _require_assigned(db, user, new_project_id)

    log.project_id = new_project_id
    log.start_time = start_at
    log.end_time = end_at
    if "description" in changes:
        log.description = changes["description"].strip()
    if end_at is not None:
        log.duration = compute_duration(start_at, end_at)

    save_log(db, log)
    _log_event("time_log.updated", log, fields=sorted(changes))
    return log


def delete_log(db: Session, user: User, log_id: int) -> None:
    log = get_user_log(db, log_id, user.id)
    if log is None:
        raise NotFound("Time log not found")
    _delete_row(db, log)
    logger.info(
        "time_log.deleted",
        extra={"extra_data": {"time_log_id": log_id, "user_id": user.id}},
    )


__all__ = [
    "create_manual",
    "delete_log",
    "edit_log",
    "start_timer",
    "stop_timer",
    "timer_status",
]
