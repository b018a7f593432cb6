from __future__ import annotations

from typing import Callable

from fastapi import Depends, Header, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from ..core.errors import Unauthorized
from ..core.permissions import ALL_CAPABILITIES, has_capability
from ..core.security import decode_token
from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..models.user import User
from .session_auth import session_user_id


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def _bearer_user_id(authorization: str | None) -> int | None:
    if not authorization:
        return None
    scheme, credentials = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not credentials:
        raise Unauthorized("Authorization header must be a bearer token")
    try:
        payload = decode_token(credentials, verify_type="access")
    except ValueError as exc:
        raise Unauthorized(str(exc)) from exc
    return payload.user_id


def _resolve_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from the session cookie, falling back to a bearer JWT."""

    user_id = session_user_id(request)
    user = get_user(db, user_id) if user_id is not None else None
    if user is None:
        token_user_id = _bearer_user_id(authorization)
        user = get_user(db, token_user_id) if token_user_id is not None else None
    if user is None:
        raise Unauthorized("Authentication required")
    return user


async def get_current_user(request: Request, user: User = Depends(_resolve_user)) -> User:
    # Must stay async: sync dependencies run in a copied context and the
    # principal would not reach the endpoint.
    _set_principal(request, f"user:{user.id}")
    return user


def require_capability(capability: str) -> Callable[..., User]:
    if capability not in ALL_CAPABILITIES:
        raise ValueError(f"Unknown capability: {capability}")

    def dependency(user: User = Depends(get_current_user)) -> User:
        if not has_capability(user.role, capability):
            raise Unauthorized(f"Role {user.role} cannot {capability}")
        return user

    dependency.__name__ = f"require_{capability.replace('-', '_')}"
    return dependency
