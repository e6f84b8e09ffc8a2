"""
PhotoShare Backend — Like Service
===================================

Likes have no unique constraint. Liking checks for an existing row first and
rejects duplicates with 400 "Already liked"; two concurrent requests from the
same user can still both insert. Unliking is idempotent.
"""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import ValidationError
from photoshare.models import Like
from photoshare.schemas.photo import LikeStatus
from photoshare.security import CurrentUser
from photoshare.services.notification_service import create_notification
from photoshare.services.photo_service import get_photo_or_404

logger = logging.getLogger(__name__)


async def count_likes(db: AsyncSession, photo_id: uuid.UUID) -> int:
    return await db.scalar(
        select(func.count()).select_from(Like).where(Like.photo_id == photo_id)
    )


async def has_liked(db: AsyncSession, photo_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    like_id = await db.scalar(
        select(Like.id).where(Like.photo_id == photo_id, Like.user_id == user_id).limit(1)
    )
    return like_id is not None


async def like_photo(db: AsyncSession, photo_id: uuid.UUID, user: CurrentUser) -> LikeStatus:
    photo = await get_photo_or_404(db, photo_id)

    if await has_liked(db, photo_id, user.id):
        raise ValidationError("Already liked", context={"photo_id": str(photo_id)})

    db.add(Like(photo_id=photo_id, user_id=user.id))
    await db.flush()

    if photo.creator_id != user.id:
        await create_notification(
            db,
            user_id=photo.creator_id,
            type="like",
            actor_id=user.id,
            photo_id=photo_id,
            message="liked your photo",
        )

    return LikeStatus(liked=True, like_count=await count_likes(db, photo_id))


async def unlike_photo(db: AsyncSession, photo_id: uuid.UUID, user: CurrentUser) -> LikeStatus:
    await db.execute(delete(Like).where(Like.photo_id == photo_id, Like.user_id == user.id))
    return LikeStatus(liked=False, like_count=await count_likes(db, photo_id))


async def like_status(db: AsyncSession, photo_id: uuid.UUID, user: CurrentUser) -> LikeStatus:
    return LikeStatus(
        liked=await has_liked(db, photo_id, user.id),
        like_count=await count_likes(db, photo_id),
    )
