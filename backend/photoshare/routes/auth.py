"""
PhotoShare Backend — Auth Route Handlers
==========================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me.
How:   Thin wrappers around auth_service; the token in every auth response is
       a 7-day HS256 JWT carrying id, email, role and displayName.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.auth import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from photoshare.schemas.common import ErrorResponse
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        400: {"description": "Missing fields", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create a consumer account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.register(db, body.email, body.password, body.display_name)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Missing fields", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange email and password for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db, body.email, body.password)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={
        401: {"description": "No token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
        404: {"description": "User no longer exists", "model": ErrorResponse},
    },
    summary="Current user",
)
async def me(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MeResponse:
    return await auth_service.get_me(db, user)
