"""
PhotoShare Backend — User Route Handlers
==========================================

Public profiles, a user's photos and likes, and PATCH /api/users/me.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import ErrorResponse, MessageResponse
from photoshare.schemas.photo import PhotoPage
from photoshare.schemas.user import ProfileUpdate, UserProfile
from photoshare.security import CurrentUser, get_current_user, get_optional_user
from photoshare.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.patch(
    "/me",
    response_model=MessageResponse,
    responses={400: {"description": "Nothing to update or bad theme", "model": ErrorResponse}},
    summary="Update your profile",
)
async def update_profile(
    body: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.update_profile(db, user, body)
    return MessageResponse(message="Profile updated")


@router.get(
    "/{user_id}",
    response_model=UserProfile,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Public profile",
)
async def get_profile(
    user_id: uuid.UUID,
    viewer: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db, user_id, viewer)


@router.get("/{user_id}/photos", response_model=PhotoPage, summary="Photos uploaded by a user")
async def user_photos(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoPage:
    return await user_service.list_user_photos(db, user_id, page, limit)


@router.get(
    "/{user_id}/likes",
    response_model=PhotoPage,
    summary="Photos a user liked, most recently liked first",
)
async def user_likes(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoPage:
    return await user_service.list_liked_photos(db, user_id, page, limit)
