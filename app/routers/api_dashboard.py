from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import VIEW_OWN_LOGS
from ..db.session import get_db
from ..deps.auth import require_capability
from ..models.user import User
from ..schemas.dashboard import DashboardStats
from ..services.reporting import personal_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def api_dashboard_stats(
    user: User = Depends(require_capability(VIEW_OWN_LOGS)),
    db: Session = Depends(get_db),
):
    return DashboardStats.model_validate(asdict(personal_summary(db, user)))
