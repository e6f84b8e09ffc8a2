"""
PhotoShare Backend — Follow Service
=====================================

Directed follow edges between users. Following notifies the followed user.
Like likes, duplicate follows are prevented by a check before the insert.
"""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import NotFoundError, ValidationError
from photoshare.models import Follow, User
from photoshare.schemas.user import FollowList, FollowResult, FollowUser
from photoshare.security import CurrentUser
from photoshare.services.notification_service import create_notification

logger = logging.getLogger(__name__)


async def count_followers(db: AsyncSession, user_id: uuid.UUID) -> int:
    return await db.scalar(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    )


async def follow_user(db: AsyncSession, user_id: uuid.UUID, follower: CurrentUser) -> FollowResult:
    if user_id == follower.id:
        raise ValidationError("Cannot follow yourself")

    if await db.get(User, user_id) is None:
        raise NotFoundError("User", resource_id=str(user_id))

    existing = await db.scalar(
        select(Follow.id)
        .where(Follow.follower_id == follower.id, Follow.following_id == user_id)
        .limit(1)
    )
    if existing is not None:
        raise ValidationError("Already following")

    db.add(Follow(follower_id=follower.id, following_id=user_id))
    await db.flush()
    await create_notification(
        db,
        user_id=user_id,
        type="follow",
        actor_id=follower.id,
        message="started following you",
    )
    logger.info("User %s followed %s", follower.id, user_id)

    return FollowResult(following=True, follower_count=await count_followers(db, user_id))


async def unfollow_user(
    db: AsyncSession, user_id: uuid.UUID, follower: CurrentUser
) -> FollowResult:
    await db.execute(
        delete(Follow).where(Follow.follower_id == follower.id, Follow.following_id == user_id)
    )
    return FollowResult(following=False, follower_count=await count_followers(db, user_id))


async def _list_edges(
    db: AsyncSession,
    match_column,
    user_column,
    user_id: uuid.UUID,
    page: int,
    limit: int,
) -> FollowList:
    rows = (
        await db.execute(
            select(User.id, User.display_name, User.avatar_url, Follow.created_at)
            .join(User, user_column == User.id)
            .where(match_column == user_id)
            .order_by(Follow.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
    ).all()
    total = await db.scalar(
        select(func.count()).select_from(Follow).where(match_column == user_id)
    )
    return FollowList(
        users=[
            FollowUser(
                id=row.id,
                display_name=row.display_name,
                avatar_url=row.avatar_url,
                followed_at=row.created_at,
            )
            for row in rows
        ],
        total=total,
    )


async def list_followers(db: AsyncSession, user_id: uuid.UUID, page: int, limit: int) -> FollowList:
    """Users who follow `user_id`, most recent first."""
    return await _list_edges(db, Follow.following_id, Follow.follower_id, user_id, page, limit)


async def list_following(db: AsyncSession, user_id: uuid.UUID, page: int, limit: int) -> FollowList:
    """Users `user_id` follows, most recent first."""
    return await _list_edges(db, Follow.follower_id, Follow.following_id, user_id, page, limit)
