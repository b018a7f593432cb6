"""Tests for the time log lifecycle: manual entries, edits and the timer."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.core.config import settings
from app.core.errors import (
    AccessDenied,
    AlreadyRunning,
    NoActiveTimer,
    NotFound,
    OrderingError,
    ValidationError,
)
from app.crud.projects import assign_users, create_project
from app.crud.users import create_user
from app.db.session import Base
from app.services import time_logs as lifecycle

# Ensure models are registered so metadata tables are created
from app.models import project as project_model  # noqa: F401
from app.models import time_log as time_log_model  # noqa: F401
from app.models import user as user_model  # noqa: F401

TimeLog = time_log_model.TimeLog
T0 = datetime(2024, 5, 15, 14, 0, tzinfo=timezone.utc)


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_user(db, name):
    return create_user(db, name=name, email=f"{name.lower()}@example.com", password_hash="x")


@pytest.fixture()
def setup(db_session):
    u1 = make_user(db_session, "Ada")
    u2 = make_user(db_session, "Bob")
    u3 = make_user(db_session, "Cy")
    project = create_project(db_session, {"name": "Website"})
    assign_users(db_session, project, [u1.id, u2.id])
    return {"u1": u1, "u2": u2, "u3": u3, "project": project}


def count_logs(db):
    return db.scalar(select(func.count()).select_from(TimeLog))


def manual(db, user, project, start, end, description="Work"):
    return lifecycle.create_manual(
        db,
        user,
        project_id=project.id,
        start=start,
        end=end,
        description=description,
    )


def test_timer_start_stop_floors_duration(db_session, setup):
    user, project = setup["u1"], setup["project"]
    started = lifecycle.start_timer(db_session, user, project_id=project.id, description="Coding", now=T0)
    assert started.end_time is None
    assert started.duration == 0

    stopped = lifecycle.stop_timer(db_session, user, now=T0 + timedelta(seconds=95))
    assert stopped.id == started.id
    assert stopped.end_time == T0 + timedelta(seconds=95)
    assert stopped.duration == 1


def test_second_start_is_rejected_without_new_row(db_session, setup):
    user, project = setup["u1"], setup["project"]
    lifecycle.start_timer(db_session, user, project_id=project.id, description="First", now=T0)
    with pytest.raises(AlreadyRunning):
        lifecycle.start_timer(db_session, user, project_id=project.id, description="Second", now=T0)
    assert count_logs(db_session) == 1


def test_other_users_may_run_timers_concurrently(db_session, setup):
    project = setup["project"]
    lifecycle.start_timer(db_session, setup["u1"], project_id=project.id, description="A", now=T0)
    lifecycle.start_timer(db_session, setup["u2"], project_id=project.id, description="B", now=T0)
    assert count_logs(db_session) == 2


def test_storage_rejects_second_active_row(db_session, setup):
    user, project = setup["u1"], setup["project"]
    for minute in (0, 1):
        db_session.add(
            TimeLog(
                user_id=user.id,
                project_id=project.id,
                start_time=T0 + timedelta(minutes=minute),
                end_time=None,
                description="raw insert",
                duration=0,
            )
        )
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_stop_twice_reports_no_active_timer(db_session, setup):
    user, project = setup["u1"], setup["project"]
    lifecycle.start_timer(db_session, user, project_id=project.id, description="Coding", now=T0)
    first = lifecycle.stop_timer(db_session, user, now=T0 + timedelta(minutes=30))

    with pytest.raises(NoActiveTimer):
        lifecycle.stop_timer(db_session, user, now=T0 + timedelta(minutes=90))

    db_session.refresh(first)
    assert first.end_time == T0 + timedelta(minutes=30)
    assert first.duration == 30


def test_stop_at_start_instant_keeps_end_after_start(db_session, setup):
    user, project = setup["u1"], setup["project"]
    lifecycle.start_timer(db_session, user, project_id=project.id, description="Blink", now=T0)
    stopped = lifecycle.stop_timer(db_session, user, now=T0)
    assert stopped.end_time > stopped.start_time
    assert stopped.duration == 0


def test_start_requires_project_and_description(db_session, setup):
    user = setup["u1"]
    with pytest.raises(ValidationError):
        lifecycle.start_timer(db_session, user, project_id=None, description="x", now=T0)
    with pytest.raises(ValidationError):
        lifecycle.start_timer(db_session, user, project_id=setup["project"].id, description="  ", now=T0)


def test_start_on_unassigned_project_is_denied(db_session, setup):
    with pytest.raises(AccessDenied):
        lifecycle.start_timer(
            db_session, setup["u3"], project_id=setup["project"].id, description="Sneaky", now=T0
        )
    assert count_logs(db_session) == 0


def test_timer_status_reports_active_log(db_session, setup):
    user, project = setup["u1"], setup["project"]
    assert lifecycle.timer_status(db_session, user) is None
    started = lifecycle.start_timer(db_session, user, project_id=project.id, description="Coding", now=T0)
    active = lifecycle.timer_status(db_session, user)
    assert active.id == started.id
    assert active.project.name == "Website"


def test_manual_entry_rejects_reversed_range(db_session, setup):
    with pytest.raises(OrderingError):
        manual(db_session, setup["u1"], setup["project"], "2024-05-15T10:00:00Z", "2024-05-15T09:00:00Z")
    with pytest.raises(OrderingError):
        manual(db_session, setup["u1"], setup["project"], "2024-05-15T10:00:00Z", "2024-05-15T10:00:00Z")
    assert count_logs(db_session) == 0


def test_manual_entry_access_follows_assignment(db_session, setup):
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T10:30:00Z")
    assert log.duration == 90
    assert log.user_id == setup["u1"].id

    with pytest.raises(AccessDenied):
        manual(db_session, setup["u3"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T10:30:00Z")
    assert count_logs(db_session) == 1


def test_manual_entry_requires_every_field(db_session, setup):
    with pytest.raises(ValidationError, match="Missing required fields"):
        lifecycle.create_manual(
            db_session,
            setup["u1"],
            project_id=setup["project"].id,
            start="2024-05-15T09:00:00Z",
            end=None,
            description="Work",
        )


def test_manual_entry_localizes_naive_timestamps(db_session, setup, monkeypatch):
    monkeypatch.setattr(settings, "TZ", "America/Chicago")
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00", "2024-05-15T09:45:00")
    assert log.start_time == datetime(2024, 5, 15, 14, 0, tzinfo=timezone.utc)
    assert log.duration == 45


def test_description_only_edit_keeps_times_and_duration(db_session, setup):
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T09:40:00Z")
    end_before = log.end_time

    edited = lifecycle.edit_log(db_session, setup["u1"], log.id, {"description": "Renamed"})
    assert edited.description == "Renamed"
    assert edited.end_time == end_before
    assert edited.duration == 40


def test_time_edit_recomputes_duration(db_session, setup):
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T09:40:00Z")
    edited = lifecycle.edit_log(db_session, setup["u1"], log.id, {"end_time": "2024-05-15T11:00:30Z"})
    assert edited.duration == 120


def test_edit_rejects_reversed_range(db_session, setup):
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T09:40:00Z")
    with pytest.raises(OrderingError):
        lifecycle.edit_log(db_session, setup["u1"], log.id, {"start_time": "2024-05-15T10:00:00Z"})
    db_session.refresh(log)
    assert log.duration == 40


def test_edit_rejects_cleared_fields(db_session, setup):
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T09:40:00Z")
    with pytest.raises(ValidationError, match="description cannot be empty"):
        lifecycle.edit_log(db_session, setup["u1"], log.id, {"description": ""})
    with pytest.raises(ValidationError, match="endTime cannot be empty"):
        lifecycle.edit_log(db_session, setup["u1"], log.id, {"end_time": None})


def test_edit_project_requires_assignment(db_session, setup):
    other = create_project(db_session, {"name": "Internal"})
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T09:40:00Z")
    with pytest.raises(AccessDenied):
        lifecycle.edit_log(db_session, setup["u1"], log.id, {"project_id": other.id})

    assign_users(db_session, other, [setup["u1"].id])
    edited = lifecycle.edit_log(db_session, setup["u1"], log.id, {"project_id": other.id})
    assert edited.project_id == other.id


def test_active_timer_allows_only_description_edits(db_session, setup):
    user, project = setup["u1"], setup["project"]
    started = lifecycle.start_timer(db_session, user, project_id=project.id, description="Coding", now=T0)

    with pytest.raises(ValidationError):
        lifecycle.edit_log(db_session, user, started.id, {"end_time": "2024-05-15T16:00:00Z"})

    edited = lifecycle.edit_log(db_session, user, started.id, {"description": "Code review"})
    assert edited.description == "Code review"
    assert edited.end_time is None
    assert edited.duration == 0


def test_logs_are_private_to_their_owner(db_session, setup):
    log = manual(db_session, setup["u1"], setup["project"], "2024-05-15T09:00:00Z", "2024-05-15T09:40:00Z")
    with pytest.raises(NotFound):
        lifecycle.edit_log(db_session, setup["u2"], log.id, {"description": "Mine now"})
    with pytest.raises(NotFound):
        lifecycle.delete_log(db_session, setup["u2"], log.id)

    lifecycle.delete_log(db_session, setup["u1"], log.id)
    assert count_logs(db_session) == 0


def test_start_race_loser_reports_already_running(db_session, setup, monkeypatch):
    user, project = setup["u1"], setup["project"]
    lifecycle.start_timer(db_session, user, project_id=project.id, description="First", now=T0)

    # Simulate a concurrent request whose pre-check ran before the first insert.
    real_get_active_log = lifecycle.get_active_log
    calls = []

    def stale_then_real(db, user_id):
        calls.append(user_id)
        if len(calls) == 1:
            return None
        return real_get_active_log(db, user_id)

    monkeypatch.setattr(lifecycle, "get_active_log", stale_then_real)
    with pytest.raises(AlreadyRunning):
        lifecycle.start_timer(db_session, user, project_id=project.id, description="Second", now=T0)

    assert len(calls) == 2
    assert count_logs(db_session) == 1
    assert real_get_active_log(db_session, user.id).description == "First"


def test_active_timer_accepts_unchanged_project_and_start(db_session, setup):
    user, project = setup["u1"], setup["project"]
    started = lifecycle.start_timer(db_session, user, project_id=project.id, description="Coding", now=T0)

    edited = lifecycle.edit_log(
        db_session,
        user,
        started.id,
        {"project_id": project.id, "start_time": T0.isoformat(), "description": "Pairing"},
    )
    assert edited.description == "Pairing"
    assert edited.start_time == T0
    assert edited.end_time is None


def test_active_timer_rejects_project_or_start_changes(db_session, setup):
    user, project = setup["u1"], setup["project"]
    other = create_project(db_session, {"name": "Internal"})
    assign_users(db_session, other, [user.id])
    started = lifecycle.start_timer(db_session, user, project_id=project.id, description="Coding", now=T0)

    with pytest.raises(ValidationError, match="Stop the running timer"):
        lifecycle.edit_log(db_session, user, started.id, {"project_id": other.id})
    with pytest.raises(ValidationError, match="Stop the running timer"):
        lifecycle.edit_log(
            db_session, user, started.id, {"start_time": (T0 - timedelta(minutes=5)).isoformat()}
        )
