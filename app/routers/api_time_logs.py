from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.permissions import LOG_TIME, VIEW_ALL_LOGS, VIEW_OWN_LOGS
from ..db.session import get_db
from ..deps.auth import require_capability
from ..models.user import User
from ..schemas.base import Message
from ..schemas.time_log import TimeLogCreate, TimeLogDetail, TimeLogOut, TimeLogPage, TimeLogUpdate
from ..services import reporting
from ..services import time_logs as lifecycle

router = APIRouter(prefix="/time-logs", tags=["time-logs"])


@router.get("", response_model=TimeLogPage)
def api_list_my_logs(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    user: User = Depends(require_capability(VIEW_OWN_LOGS)),
    db: Session = Depends(get_db),
):
    result = reporting.paginated_user_logs(db, user, page=page, limit=limit)
    return TimeLogPage(
        time_logs=[TimeLogOut.model_validate(log) for log in result.time_logs],
        pagination=result.pagination,
    )


# Declared before "/{log_id}" routes so "summary" is never read as an id.
@router.get("/summary", response_model=list[TimeLogDetail])
def api_logs_summary(
    user_id: Optional[int] = Query(None, alias="userId"),
    project_id: Optional[int] = Query(None, alias="projectId"),
    sort: Optional[str] = Query(None),
    _: User = Depends(require_capability(VIEW_ALL_LOGS)),
    db: Session = Depends(get_db),
):
    return reporting.filtered_logs(db, user_id=user_id, project_id=project_id, sort=sort)


@router.post("", response_model=TimeLogOut, status_code=201)
def api_create_log(
    payload: TimeLogCreate,
    user: User = Depends(require_capability(LOG_TIME)),
    db: Session = Depends(get_db),
):
    return lifecycle.create_manual(
        db,
        user,
        project_id=payload.project_id,
        start=payload.start_time,
        end=payload.end_time,
        description=payload.description,
    )


@router.put("/{log_id}", response_model=TimeLogOut)
def api_update_log(
    log_id: int,
    payload: TimeLogUpdate,
    user: User = Depends(require_capability(LOG_TIME)),
    db: Session = Depends(get_db),
):
    return lifecycle.edit_log(db, user, log_id, payload.model_dump(exclude_unset=True))


@router.delete("/{log_id}", response_model=Message)
def api_delete_log(
    log_id: int,
    user: User = Depends(require_capability(LOG_TIME)),
    db: Session = Depends(get_db),
):
    lifecycle.delete_log(db, user, log_id)
    return Message(message="Time log deleted")
