"""Pydantic schemas that describe project payloads for the API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .user import UserOut


class ProjectCreate(CamelModel):
    name: Optional[str] = None


class AssignUsersRequest(CamelModel):
    user_ids: Optional[list[int]] = None


class UnassignUserRequest(CamelModel):
    user_id: Optional[int] = None


class ProjectRef(CamelModel):
    id: int
    name: str


class ProjectOut(ProjectRef):
    created_at: datetime


class ProjectWithUsers(ProjectOut):
    users: list[UserOut] = Field(default_factory=list)
