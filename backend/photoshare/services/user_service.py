"""
PhotoShare Backend — User Profile Service
===========================================

Public profiles with follower/following/photo counts, a user's photos, the
photos a user liked (most recently liked first) and self-service profile edits.

Profile counts come from correlated COUNT subqueries on the users row, which
keeps the query a single round trip.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import NotFoundError, ValidationError
from photoshare.models import Follow, Like, Photo, User
from photoshare.models.user import USER_THEMES
from photoshare.schemas.photo import PhotoPage
from photoshare.schemas.user import ProfileUpdate, UserProfile
from photoshare.security import CurrentUser
from photoshare.services.photo_service import aggregate_photo_query, fetch_photo_page

logger = logging.getLogger(__name__)


def _count_where(model, *criteria):
    return select(func.count()).select_from(model).where(*criteria).scalar_subquery()


async def get_profile(
    db: AsyncSession, user_id: uuid.UUID, viewer: Optional[CurrentUser] = None
) -> UserProfile:
    row = (
        await db.execute(
            select(
                User.id,
                User.display_name,
                User.bio,
                User.avatar_url,
                User.created_at,
                _count_where(Photo, Photo.creator_id == User.id).label("photo_count"),
                _count_where(Follow, Follow.following_id == User.id).label("follower_count"),
                _count_where(Follow, Follow.follower_id == User.id).label("following_count"),
            ).where(User.id == user_id)
        )
    ).first()
    if row is None:
        raise NotFoundError("User", resource_id=str(user_id))

    is_own = viewer is not None and viewer.id == user_id
    is_following = False
    if viewer is not None and not is_own:
        is_following = (
            await db.scalar(
                select(Follow.id)
                .where(Follow.follower_id == viewer.id, Follow.following_id == user_id)
                .limit(1)
            )
        ) is not None

    return UserProfile(
        id=row.id,
        display_name=row.display_name,
        bio=row.bio,
        avatar_url=row.avatar_url,
        created_at=row.created_at,
        photo_count=row.photo_count,
        follower_count=row.follower_count,
        following_count=row.following_count,
        is_following=is_following,
        is_own_profile=is_own,
    )


async def list_user_photos(
    db: AsyncSession, user_id: uuid.UUID, page: int, limit: int
) -> PhotoPage:
    return await fetch_photo_page(
        db,
        aggregate_photo_query()
        .where(Photo.creator_id == user_id)
        .order_by(Photo.created_at.desc()),
        select(func.count()).select_from(Photo).where(Photo.creator_id == user_id),
        page,
        limit,
    )


async def list_liked_photos(
    db: AsyncSession, user_id: uuid.UUID, page: int, limit: int
) -> PhotoPage:
    return await fetch_photo_page(
        db,
        aggregate_photo_query(liked_by=user_id),
        select(func.count()).select_from(Like).where(Like.user_id == user_id),
        page,
        limit,
    )


async def update_profile(db: AsyncSession, user: CurrentUser, body: ProfileUpdate) -> None:
    """
    Applies displayName and theme when non-empty and bio whenever it was sent
    (null clears it). Nothing applicable → 400 "No updates provided".
    """
    values = {}
    if body.display_name:
        values["display_name"] = body.display_name
    if "bio" in body.model_fields_set:
        values["bio"] = body.bio
    if body.theme:
        if body.theme not in USER_THEMES:
            raise ValidationError("Theme must be 'light' or 'dark'", field="theme")
        values["theme"] = body.theme

    if not values:
        raise ValidationError("No updates provided")

    await db.execute(update(User).where(User.id == user.id).values(**values))
    logger.info("Profile updated for %s: %s", user.id, sorted(values))
