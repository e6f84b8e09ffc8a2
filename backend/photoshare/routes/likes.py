"""
PhotoShare Backend — Like Route Handlers
==========================================

POST/DELETE /api/likes/{photo_id} and GET /api/likes/{photo_id}/status.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import ErrorResponse
from photoshare.schemas.photo import LikeStatus
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import like_service

router = APIRouter(prefix="/api/likes", tags=["Likes"])


@router.post(
    "/{photo_id}",
    response_model=LikeStatus,
    responses={
        400: {"description": "Already liked", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Like a photo",
)
async def like_photo(
    photo_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeStatus:
    return await like_service.like_photo(db, photo_id, user)


@router.delete("/{photo_id}", response_model=LikeStatus, summary="Remove your like")
async def unlike_photo(
    photo_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeStatus:
    return await like_service.unlike_photo(db, photo_id, user)


@router.get("/{photo_id}/status", response_model=LikeStatus, summary="Whether you liked a photo")
async def like_status(
    photo_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> LikeStatus:
    return await like_service.like_status(db, photo_id, user)
