"""Role to capability table.

Endpoints ask for a capability (``require_capability("log-time")``) rather than
naming a role, so the rules for who may do what live in one place.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


CREATE_PROJECT = "create-project"
ASSIGN_USERS = "assign-users"
LIST_PROJECTS = "list-projects"
VIEW_USERS = "view-users"
VIEW_ALL_LOGS = "view-all-logs"
VIEW_OWN_LOGS = "view-own-logs"
LOG_TIME = "log-time"

CAPABILITIES: dict[Role, frozenset[str]] = {
    Role.USER: frozenset({LOG_TIME, VIEW_OWN_LOGS, LIST_PROJECTS}),
    Role.ADMIN: frozenset({CREATE_PROJECT, ASSIGN_USERS, LIST_PROJECTS, VIEW_USERS, VIEW_ALL_LOGS}),
}

ALL_CAPABILITIES = frozenset().union(*CAPABILITIES.values())


def has_capability(role: str | Role | None, capability: str) -> bool:
    if role is None:
        return False
    try:
        resolved = Role(role)
    except ValueError:
        return False
    return capability in CAPABILITIES.get(resolved, frozenset())


__all__ = [
    "ALL_CAPABILITIES",
    "ASSIGN_USERS",
    "CAPABILITIES",
    "CREATE_PROJECT",
    "LIST_PROJECTS",
    "LOG_TIME",
    "Role",
    "VIEW_ALL_LOGS",
    "VIEW_OWN_LOGS",
    "VIEW_USERS",
    "has_capability",
]
