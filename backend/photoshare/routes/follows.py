"""
PhotoShare Backend — Follow Route Handlers
============================================

POST/DELETE /api/follows/{user_id}, plus follower and following lists.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import ErrorResponse
from photoshare.schemas.user import FollowList, FollowResult
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import follow_service

router = APIRouter(prefix="/api/follows", tags=["Follows"])


@router.post(
    "/{user_id}",
    response_model=FollowResult,
    responses={
        400: {"description": "Self-follow or already following", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Follow a user",
)
async def follow(
    user_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResult:
    return await follow_service.follow_user(db, user_id, user)


@router.delete("/{user_id}", response_model=FollowResult, summary="Unfollow a user")
async def unfollow(
    user_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResult:
    return await follow_service.unfollow_user(db, user_id, user)


@router.get("/{user_id}/followers", response_model=FollowList, summary="Who follows a user")
async def followers(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> FollowList:
    return await follow_service.list_followers(db, user_id, page, limit)


@router.get("/{user_id}/following", response_model=FollowList, summary="Who a user follows")
async def following(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> FollowList:
    return await follow_service.list_following(db, user_id, page, limit)
