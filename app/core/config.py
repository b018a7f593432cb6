"""Environment-driven configuration for Project Clock.

Every knob the service reads lives on ``Settings``. Values come from the
process environment first, then ``.env`` / ``.env.local`` files, then the
defaults below, so the app boots in development without any setup.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "Project Clock"
    APP_ENV: str = "dev"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Local timezone used for naive input timestamps and dashboard windows.
    TZ: str = "America/Chicago"
    # 0 = Monday ... 6 = Sunday
    WEEK_START: int = Field(default=0, ge=0, le=6)

    DB_URL: str = Field(
        default="sqlite:///./project_clock.db",
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
    )

    # ---- Browser sessions (signed cookie)
    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "pc_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 30
    SESSION_HTTPS_ONLY: bool = False

    # ---- Headless clients (bearer JWT)
    JWT_SECRET: str = "change-me"
    JWT_ACCESS_TTL_MIN: int = 15
    JWT_REFRESH_TTL_DAYS: int = 7

    # Comma separated list of origins allowed by CORS.
    ALLOWED_ORIGINS: str = ""

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Optional admin bootstrap; created once at startup when both are set.
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""
    ADMIN_NAME: str = "Administrator"

    @property
    def is_sqlite(self) -> bool:
        return self.DB_URL.startswith("sqlite")

    @property
    def allowed_origins(self) -> list[str]:
        return [item.strip() for item in self.ALLOWED_ORIGINS.split(",") if item.strip()]

    @field_validator("API_PREFIX", mode="before")
    @classmethod
    def normalize_prefix(cls, value: Any) -> str:
        text = str(value or "").strip().rstrip("/")
        if text and not text.startswith("/"):
            text = "/" + text
        return text


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
