"""CRUD helpers for time log rows.

These functions only read and write; the rules about who may do what and how
durations are derived live in ``app.services.time_logs``.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import asc, desc, func, select, update
from sqlalchemy.orm import Session, joinedload

from ..models.time_log import TimeLog


def get_user_log(db: Session, log_id: int, user_id: int) -> TimeLog | None:
    stmt = (
        select(TimeLog)
        .options(joinedload(TimeLog.project))
        .where(TimeLog.id == log_id, TimeLog.user_id == user_id)
    )
    return db.execute(stmt).scalars().first()


def get_active_log(db: Session, user_id: int) -> TimeLog | None:
    stmt = (
        select(TimeLog)
        .options(joinedload(TimeLog.project))
        .where(TimeLog.user_id == user_id, TimeLog.end_time.is_(None))
    )
    return db.execute(stmt).scalars().first()


def insert_log(db: Session, log: TimeLog) -> TimeLog:
    """Persist a new row. Constraint violations propagate to the caller."""

    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def close_active_log(db: Session, log: TimeLog, *, end_time: datetime, duration: int) -> bool:
    """Set the end of a running timer. False if another request closed it first."""

    result = db.execute(
        update(TimeLog)
        .where(TimeLog.id == log.id, TimeLog.end_time.is_(None))
        .values(end_time=end_time, duration=duration)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        return False
    db.refresh(log)
    return True


def save_log(db: Session, log: TimeLog) -> TimeLog:
    db.commit()
    db.refresh(log)
    return log


def delete_log(db: Session, log: TimeLog) -> None:
    db.delete(log)
    db.commit()


def count_user_logs(db: Session, user_id: int) -> int:
    return db.scalar(select(func.count()).select_from(TimeLog).where(TimeLog.user_id == user_id)) or 0


def list_user_logs(db: Session, user_id: int, limit: int = 10, offset: int = 0) -> list[TimeLog]:
    stmt = (
        select(TimeLog)
        .options(joinedload(TimeLog.project))
        .where(TimeLog.user_id == user_id)
        .order_by(desc(TimeLog.created_at), desc(TimeLog.id))
        .limit(limit)
        .offset(offset)
    )
    return list(db.execute(stmt).scalars().all())


SORT_COLUMNS = {
    "startTime": asc(TimeLog.start_time),
    "-startTime": desc(TimeLog.start_time),
    "createdAt": asc(TimeLog.created_at),
    "-createdAt": desc(TimeLog.created_at),
}


def list_logs(
    db: Session,
    *,
    user_id: int | None = None,
    project_id: int | None = None,
    sort: str | None = None,
) -> list[TimeLog]:
    stmt = select(TimeLog).options(joinedload(TimeLog.user), joinedload(TimeLog.project))
    if user_id is not None:
        stmt = stmt.where(TimeLog.user_id == user_id)
    if project_id is not None:
        stmt = stmt.where(TimeLog.project_id == project_id)
    if sort:
        stmt = stmt.order_by(SORT_COLUMNS[sort], asc(TimeLog.id))
    else:
        stmt = stmt.order_by(asc(TimeLog.id))
    return list(db.execute(stmt).scalars().all())
