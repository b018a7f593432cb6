from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.permissions import ASSIGN_USERS, CREATE_PROJECT, LIST_PROJECTS, VIEW_USERS
from ..crud.projects import (
    assign_users,
    create_project,
    list_projects,
    list_user_projects,
    require_project,
    unassign_user,
)
from ..crud.users import list_users_with_projects
from ..db.session import get_db
from ..deps.auth import require_capability
from ..models.user import User
from ..schemas.base import Message
from ..schemas.project import (
    AssignUsersRequest,
    ProjectCreate,
    ProjectOut,
    ProjectWithUsers,
    UnassignUserRequest,
)
from ..schemas.user import UserWithProjects

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectOut])
def api_list_projects(
    user: User = Depends(require_capability(LIST_PROJECTS)),
    db: Session = Depends(get_db),
):
    if user.is_admin:
        return list_projects(db)
    return list_user_projects(db, user.id)


@router.post("", response_model=ProjectOut, status_code=201)
def api_create_project(
    payload: ProjectCreate,
    _: User = Depends(require_capability(CREATE_PROJECT)),
    db: Session = Depends(get_db),
):
    return create_project(db, payload.model_dump(exclude_unset=True))


@router.get("/user-projects", response_model=list[UserWithProjects])
def api_user_projects(
    _: User = Depends(require_capability(VIEW_USERS)),
    db: Session = Depends(get_db),
):
    return list_users_with_projects(db)


@router.patch("/{project_id}/assign", response_model=ProjectWithUsers)
def api_assign_users(
    project_id: int,
    payload: AssignUsersRequest,
    _: User = Depends(require_capability(ASSIGN_USERS)),
    db: Session = Depends(get_db),
):
    project = require_project(db, project_id)
    return assign_users(db, project, payload.user_ids)


@router.patch("/{project_id}/unassign", response_model=Message)
def api_unassign_user(
    project_id: int,
    payload: UnassignUserRequest,
    _: User = Depends(require_capability(ASSIGN_USERS)),
    db: Session = Depends(get_db),
):
    project = require_project(db, project_id)
    unassign_user(db, project, payload.user_id)
    return Message(message="User unassigned from project")
