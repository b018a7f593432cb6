"""Application factory for Project Clock.

``create_app`` wires configuration, middleware, the API routers and the error
envelope together. Database tables, migrations and the optional admin account
are set up in the lifespan hook, so importing the package never touches the
database.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings

logger = logging.getLogger(__name__)


def bootstrap_database() -> None:
    """Create tables, apply migrations and seed the admin account."""

    from .db.migrate import run_migrations
    from .db.session import Base, SessionLocal, engine
    from .services.accounts import ensure_admin

    # Importing the models registers them with the metadata.
    from .models import project as _project  # noqa: F401
    from .models import time_log as _time_log  # noqa: F401
    from .models import user as _user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    run_migrations(engine)
    with SessionLocal() as db:
        admin = ensure_admin(db)
    if admin is not None:
        logger.info("admin.ready", extra={"extra_data": {"user_id": admin.id}})


@asynccontextmanager
async def lifespan(app: FastAPI):
    bootstrap_database()
    yield


def create_app(*, bootstrap: bool = True) -> FastAPI:
    from .core.errors import register_exception_handlers
    from .middlewares import RequestIdMiddleware
    from .routers import api_auth, api_dashboard, api_projects, api_time_logs, api_timer, api_users

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan if bootstrap else None)

    # Sessions remember the logged-in user between requests in a signed cookie.
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.APP_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.SESSION_HTTPS_ONLY,
    )
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestIdMiddleware)

    for module in (api_auth, api_projects, api_users, api_time_logs, api_timer, api_dashboard):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    register_exception_handlers(app)
    return app


__all__ = ["bootstrap_database", "create_app"]
