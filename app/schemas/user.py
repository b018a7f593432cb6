from __future__ import annotations

from pydantic import Field

from .base import CamelModel


class UserRef(CamelModel):
    id: int
    name: str
    email: str


class UserOut(UserRef):
    role: str


class ProjectName(CamelModel):
    id: int
    name: str


class UserWithProjects(UserRef):
    projects: list[ProjectName] = Field(default_factory=list)
