"""Sign-up, credential checks and the startup admin account."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import Unauthorized, ValidationError
from ..core.permissions import Role
from ..core.security import hash_password, verify_password
from ..crud.users import create_user, get_user_by_email, normalize_email
from ..models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def register_user(
    db: Session,
    *,
    name: str | None,
    email: str | None,
    password: str | None,
    role: Role = Role.USER,
) -> User:
    name = (name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    if "@" not in email:
        raise ValidationError("Email address is not valid")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if get_user_by_email(db, email) is not None:
        raise ValidationError("Email already registered")

    user = create_user(
        db,
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
    )
    logger.info("user.registered", extra={"extra_data": {"user_id": user.id, "role": user.role}})
    return user


def authenticate(db: Session, *, email: str | None, password: str | None) -> User:
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("auth.login_failed", extra={"extra_data": {"email": normalize_email(email)}})
        raise Unauthorized("Invalid email or password")
    logger.info("auth.login", extra={"extra_data": {"user_id": user.id}})
    return user


def ensure_admin(db: Session) -> User | None:
    """Create the configured admin once; an existing account is left untouched."""

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None
    existing = get_user_by_email(db, settings.ADMIN_EMAIL)
    if existing is not None:
        return existing
    return register_user(
        db,
        name=settings.ADMIN_NAME,
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD,
        role=Role.ADMIN,
    )


__all__ = ["MIN_PASSWORD_LENGTH", "authenticate", "ensure_admin", "register_user"]
