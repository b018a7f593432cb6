from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.errors import Unauthorized
from ..core.security import issue_token_pair, refresh_access_token
from ..db.session import get_db
from ..deps.auth import get_current_user
from ..deps.session_auth import forget_user, remember_user
from ..models.user import User
from ..schemas.auth import LoginRequest, LoginResponse, RefreshRequest, RegisterRequest, TokenResponse
from ..schemas.base import Message
from ..schemas.user import UserOut
from ..services.accounts import authenticate, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201, summary="Create a user account")
def api_register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return register_user(db, name=payload.name, email=payload.email, password=payload.password)


@router.post("/login", response_model=LoginResponse, summary="Start a session and issue JWTs")
def api_login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = authenticate(db, email=payload.email, password=payload.password)
    remember_user(request, user.id)
    pair = issue_token_pair(user.id, role=user.role)
    return LoginResponse(**pair.model_dump(), user=UserOut.model_validate(user))


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def api_refresh(payload: RefreshRequest):
    try:
        pair = refresh_access_token(payload.refresh_token)
    except ValueError as exc:
        raise Unauthorized(str(exc)) from exc
    return TokenResponse(**pair.model_dump())


@router.post("/logout", response_model=Message)
def api_logout(request: Request):
    forget_user(request)
    return Message(message="Logged out")


@router.get("/me", response_model=UserOut)
def api_me(user: User = Depends(get_current_user)):
    return user
