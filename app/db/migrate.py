"""Small idempotent schema upgrades applied at startup.

``Base.metadata.create_all`` only creates missing tables; it never adds
indexes to tables that already exist. The helpers here fill that gap for
databases created by earlier builds.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable

from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ..models.time_log import ACTIVE_TIMER_INDEX, TimeLog

logger = logging.getLogger(__name__)


def _index_names(engine: Engine, table: str) -> set[str]:
    inspector = inspect(engine)
    if not inspector.has_table(table):
        return set()
    return {record["name"] for record in inspector.get_indexes(table) if record.get("name")}


def _create_index_if_not_exists(
    engine: Engine,
    table: str,
    name: str,
    cols: Iterable[str],
    *,
    unique: bool = False,
    where: str | None = None,
) -> bool:
    """Build an index only if it hasn't already been defined. Returns True when created."""

    if name in _index_names(engine, table):
        return False
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    where_sql = f" WHERE {where}" if where else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX {name} ON {table} ({cols_sql}){where_sql}"))
    logger.info("migration.index_created", extra={"extra_data": {"table": table, "index": name}})
    return True


def _close_duplicate_active_timers(engine: Engine) -> int:
    """Keep only the newest open entry per user so the unique index can be built.

    Older open rows are closed one second after they started, giving them a
    zero-minute duration rather than an invented one.
    """

    with Session(engine) as db:
        rows = db.execute(
            select(TimeLog)
            .where(TimeLog.end_time.is_(None))
            .order_by(TimeLog.user_id, TimeLog.start_time.desc(), TimeLog.id.desc())
        ).scalars().all()
        seen: set[int] = set()
        stale = 0
        for log in rows:
            if log.user_id in seen:
                log.end_time = log.start_time + timedelta(seconds=1)
                log.duration = 0
                stale += 1
            else:
                seen.add(log.user_id)
        db.commit()
    if stale:
        logger.warning(
            "migration.duplicate_timers_closed",
            extra={"extra_data": {"count": stale}},
        )
    return stale


def run_migrations(engine: Engine) -> None:
    """Bring an existing schema up to date with the expectations of the code."""

    if not inspect(engine).has_table("time_logs"):
        # Nothing to upgrade; create_all builds the full schema.
        return

    if ACTIVE_TIMER_INDEX not in _index_names(engine, "time_logs"):
        _close_duplicate_active_timers(engine)
        _create_index_if_not_exists(
            engine,
            "time_logs",
            ACTIVE_TIMER_INDEX,
            ["user_id"],
            unique=True,
            where="end_time IS NULL",
        )

    _create_index_if_not_exists(engine, "time_logs", "ix_time_logs_user_start", ["user_id", "start_time"])
