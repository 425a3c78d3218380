"""
BabyJournal Backend — Authentication Routes
============================================

Identity lives in a signed session cookie (SessionMiddleware). Logging in
or registering stores `user_id` in the session; logging out clears it.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from babyjournal.database import get_db_session
from babyjournal.dependencies import SESSION_USER_KEY, get_requester_id, require_user_id
from babyjournal.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from babyjournal.schemas.common import ErrorResponse, MessageResponse
from babyjournal.services.journal_service import journal_service
from babyjournal.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class AuthResponse(BaseModel):
    message: str
    user: UserResponse


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={
        403: {"description": "Registrations are closed", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account and log in",
)
async def register(
    payload: RegisterRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await user_service.register(db, payload)
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    return AuthResponse(message="User registered", user=user)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={400: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await user_service.authenticate(db, payload)
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    logger.info("User %s logged in", user.id)
    return AuthResponse(message="Logged in", user=user)


@router.post("/logout", response_model=MessageResponse, summary="End the session")
async def logout(request: Request, user_id: int = Depends(require_user_id)) -> MessageResponse:
    request.session.clear()
    logger.info("User %s logged out", user_id)
    return MessageResponse(message="Logged out")


@router.get("/session", response_model=SessionResponse, summary="Current session state")
async def session_state(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> SessionResponse:
    """
    Who is logged in and which journal is active. A session that points at
    a user who no longer exists is cleared.
    """
    user_id = get_requester_id(request)
    if user_id is None:
        return SessionResponse(is_authenticated=False)

    user = await user_service.get_user(db, user_id)
    if user is None:
        request.session.clear()
        return SessionResponse(is_authenticated=False)

    active = await journal_service.get_active_journal(db, user_id, request.session)
    return SessionResponse(
        is_authenticated=True,
        user=UserResponse.model_validate(user),
        active_journal=active,
    )
