"""Helpers for the signed session cookie set at login."""

from __future__ import annotations

from fastapi import Request

SESSION_USER_KEY = "user_id"


def session_user_id(request: Request) -> int | None:
    if "session" not in request.scope:
        return None
    raw = request.session.get(SESSION_USER_KEY)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.isdigit():
        return int(raw)
    return None


def remember_user(request: Request, user_id: int) -> None:
    request.session[SESSION_USER_KEY] = user_id


def forget_user(request: Request) -> None:
    request.session.clear()
