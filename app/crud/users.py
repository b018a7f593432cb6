"""CRUD helpers for user accounts."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..core.errors import ValidationError
from ..models.user import User


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    return db.execute(stmt).scalars().first()


def get_users_by_ids(db: Session, user_ids: Iterable[int]) -> list[User]:
    ids = set(user_ids)
    if not ids:
        return []
    return list(db.execute(select(User).where(User.id.in_(ids)).order_by(User.id)).scalars().all())


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.id)).scalars().all())


def list_users_with_projects(db: Session, role: str = "USER") -> list[User]:
    stmt = (
        select(User)
        .options(selectinload(User.projects))
        .where(User.role == role)
        .order_by(User.name, User.id)
    )
    return list(db.execute(stmt).scalars().all())


def create_user(db: Session, *, name: str, email: str, password_hash: str, role: str = "USER") -> User:
    user = User(
        name=name.strip(),
        email=normalize_email(email),
        password_hash=password_hash,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError("Email already registered") from exc
    db.refresh(user)
    return user
