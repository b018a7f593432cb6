from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import VIEW_USERS
from ..crud.users import list_users
from ..db.session import get_db
from ..deps.auth import require_capability
from ..schemas.user import UserOut

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_capability(VIEW_USERS))])


@router.get("", response_model=list[UserOut])
def api_list_users(db: Session = Depends(get_db)):
    return list_users(db)
