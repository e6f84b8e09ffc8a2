"""
PhotoShare Backend — Rating Route Handlers
============================================

Star ratings (1-5) under /api/photos/{photo_id}/ratings. Posting again
replaces the caller's earlier rating.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import ErrorResponse
from photoshare.schemas.photo import MyRatingResponse, RatingCreate, RatingResponse, RatingStats
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import rating_service

router = APIRouter(prefix="/api/photos/{photo_id}/ratings", tags=["Ratings"])


@router.get(
    "",
    response_model=RatingStats,
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Average, count and star distribution",
)
async def get_rating_stats(
    photo_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> RatingStats:
    return await rating_service.get_rating_stats(db, photo_id)


@router.post(
    "",
    response_model=RatingResponse,
    responses={
        400: {"description": "Rating outside 1-5", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Rate a photo (insert or replace)",
)
async def rate_photo(
    photo_id: uuid.UUID,
    body: RatingCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RatingResponse:
    return await rating_service.rate_photo(db, photo_id, user, body.rating)


@router.get(
    "/me",
    response_model=MyRatingResponse,
    summary="The caller's rating, or null",
)
async def get_my_rating(
    photo_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MyRatingResponse:
    return await rating_service.get_my_rating(db, photo_id, user)
