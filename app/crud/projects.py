"""CRUD helpers for projects and their user rosters."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..core.errors import NotFound, ValidationError
from ..models.project import Project
from ..models.user import User
from .users import get_users_by_ids

logger = logging.getLogger(__name__)


def list_projects(db: Session) -> list[Project]:
    return list(db.execute(select(Project).order_by(Project.id)).scalars().all())


def list_user_projects(db: Session, user_id: int) -> list[Project]:
    stmt = (
        select(Project)
        .where(Project.users.any(User.id == user_id))
        .order_by(Project.name, Project.id)
    )
    return list(db.execute(stmt).scalars().all())


def get_project(db: Session, project_id: int) -> Project | None:
    stmt = select(Project).options(selectinload(Project.users)).where(Project.id == project_id)
    return db.execute(stmt).scalars().first()


def require_project(db: Session, project_id: int) -> Project:
    project = get_project(db, project_id)
    if not project:
        raise NotFound("Project not found")
    return project


def get_assigned_project(db: Session, project_id: int, user_id: int) -> Project | None:
    """Return the project only if ``user_id`` is on its roster."""

    stmt = select(Project).where(
        Project.id == project_id,
        Project.users.any(User.id == user_id),
    )
    return db.execute(stmt).scalars().first()


def create_project(db: Session, payload: dict) -> Project:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    project = Project(name=name)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("project.created", extra={"extra_data": {"project_id": project.id}})
    return project


def assign_users(db: Session, project: Project, user_ids: list[int] | None) -> Project:
    """Replace the roster with exactly ``user_ids``; unknown ids change nothing."""

    if user_ids is None:
        raise ValidationError("userIds is required")
    wanted = list(dict.fromkeys(user_ids))
    users = get_users_by_ids(db, wanted)
    found = {user.id for user in users}
    missing = [user_id for user_id in wanted if user_id not in found]
    if missing:
        raise ValidationError(f"Unknown user id(s): {', '.join(str(i) for i in missing)}")
    project.users = users
    db.commit()
    db.refresh(project)
    logger.info(
        "project.users_assigned",
        extra={"extra_data": {"project_id": project.id, "user_ids": sorted(found)}},
    )
    return project


def unassign_user(db: Session, project: Project, user_id: int | None) -> Project:
    if user_id is None:
        raise ValidationError("userId is required")
    project.users = [user for user in project.users if user.id != user_id]
    db.commit()
    db.refresh(project)
    logger.info(
        "project.user_unassigned",
        extra={"extra_data": {"project_id": project.id, "user_id": user_id}},
    )
    return project
