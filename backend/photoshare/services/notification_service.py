"""
PhotoShare Backend — Notification Service
===========================================

What:  Creates notifications on social events and serves the caller's inbox.

Producers:
    like      like_service, when someone likes another user's photo
    comment   comment_service, when someone comments on another user's photo
    follow    follow_service, when someone follows a user

Every read and write is scoped to the owner (user_id). Mark-read and delete
silently do nothing for ids the caller does not own, so they never reveal
whether another user's notification exists.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from photoshare.models import Notification, Photo, User
from photoshare.schemas.common import Pagination
from photoshare.schemas.notification import (
    NotificationActor,
    NotificationItem,
    NotificationList,
    NotificationPhoto,
)
from photoshare.services.storage_service import storage_service

logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    type: str,
    actor_id: Optional[uuid.UUID] = None,
    message: Optional[str] = None,
    photo_id: Optional[uuid.UUID] = None,
    comment_id: Optional[uuid.UUID] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        actor_id=actor_id,
        photo_id=photo_id,
        comment_id=comment_id,
        message=message,
    )
    db.add(notification)
    await db.flush()
    logger.debug("Notification %s (%s) for user %s", notification.id, type, user_id)
    return notification


async def count_unread(db: AsyncSession, user_id: uuid.UUID) -> int:
    return await db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
    )


async def list_notifications(
    db: AsyncSession, user_id: uuid.UUID, page: int, limit: int
) -> NotificationList:
    actor = aliased(User, name="actor")
    rows = (
        await db.execute(
            select(
                Notification,
                actor.id.label("actor_id"),
                actor.display_name.label("actor_name"),
                actor.avatar_url.label("actor_avatar"),
                Photo.title.label("photo_title"),
                Photo.file_path.label("photo_path"),
            )
            .outerjoin(actor, Notification.actor_id == actor.id)
            .outerjoin(Photo, Notification.photo_id == Photo.id)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
    ).all()

    total = await db.scalar(
        select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
    )

    items = []
    for row in rows:
        n = row.Notification
        items.append(
            NotificationItem(
                id=n.id,
                type=n.type,
                message=n.message,
                is_read=n.is_read,
                created_at=n.created_at,
                actor=(
                    NotificationActor(
                        id=row.actor_id,
                        display_name=row.actor_name,
                        avatar_url=row.actor_avatar,
                    )
                    if row.actor_id
                    else None
                ),
                photo=(
                    NotificationPhoto(
                        id=n.photo_id,
                        title=row.photo_title,
                        file_path=storage_service.resolve_url(row.photo_path),
                    )
                    if n.photo_id and row.photo_path
                    else None
                ),
            )
        )

    return NotificationList(
        notifications=items,
        pagination=Pagination(page=page, limit=limit, total=total),
        unread_count=await count_unread(db, user_id),
    )


async def mark_read(db: AsyncSession, user_id: uuid.UUID, notification_id: uuid.UUID) -> None:
    await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(is_read=True)
    )


async def mark_all_read(db: AsyncSession, user_id: uuid.UUID) -> None:
    await db.execute(
        update(Notification).where(Notification.user_id == user_id).values(is_read=True)
    )


async def delete_notification(
    db: AsyncSession, user_id: uuid.UUID, notification_id: uuid.UUID
) -> None:
    await db.execute(
        delete(Notification).where(
            Notification.id == notification_id, Notification.user_id == user_id
        )
    )
