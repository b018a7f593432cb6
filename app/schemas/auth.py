"""Request/response bodies for registration, login and token refresh."""

from __future__ import annotations

from typing import Optional

from .base import CamelModel
from .user import UserOut


class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {"name": "Ada Lovelace", "email": "ada@example.com", "password": "correct-horse"}
        },
    }


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(CamelModel):
    refresh_token: str

    model_config = {
        "json_schema_extra": {"example": {"refreshToken": "<jwt>"}},
    }


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(TokenResponse):
    user: UserOut
