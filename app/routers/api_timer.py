from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import LOG_TIME
from ..db.session import get_db
from ..deps.auth import require_capability
from ..models.user import User
from ..schemas.time_log import TimeLogOut, TimerStart, TimerStatus
from ..services import time_logs as lifecycle

router = APIRouter(prefix="/timer", tags=["timer"])


@router.post("/start", response_model=TimeLogOut, status_code=201)
def api_start_timer(
    payload: TimerStart,
    user: User = Depends(require_capability(LOG_TIME)),
    db: Session = Depends(get_db),
):
    return lifecycle.start_timer(db, user, project_id=payload.project_id, description=payload.description)


@router.post("/stop", response_model=TimeLogOut)
def api_stop_timer(
    user: User = Depends(require_capability(LOG_TIME)),
    db: Session = Depends(get_db),
):
    return lifecycle.stop_timer(db, user)


@router.get("/status", response_model=TimerStatus)
def api_timer_status(
    user: User = Depends(require_capability(LOG_TIME)),
    db: Session = Depends(get_db),
):
    active = lifecycle.timer_status(db, user)
    return TimerStatus(active_timer=TimeLogOut.model_validate(active) if active else None)
