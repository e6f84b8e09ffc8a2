"""
PhotoShare Backend — Comment Service
======================================

Comments are listed newest first with their author. Posting trims the content
and notifies the photo owner (unless they commented on their own photo).
Only the author may delete a comment.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from photoshare.models import Comment, User
from photoshare.schemas.photo import CommentAuthor, CommentResponse
from photoshare.security import CurrentUser
from photoshare.services.notification_service import create_notification
from photoshare.services.photo_service import get_photo_or_404

logger = logging.getLogger(__name__)


async def list_comments(db: AsyncSession, photo_id: uuid.UUID) -> List[CommentResponse]:
    await get_photo_or_404(db, photo_id)
    rows = (
        await db.execute(
            select(Comment, User.display_name, User.role)
            .join(User, Comment.user_id == User.id)
            .where(Comment.photo_id == photo_id)
            .order_by(Comment.created_at.desc())
        )
    ).all()
    return [
        CommentResponse(
            id=comment.id,
            content=comment.content,
            created_at=comment.created_at,
            user=CommentAuthor(id=comment.user_id, display_name=display_name, role=role),
        )
        for comment, display_name, role in rows
    ]


async def add_comment(
    db: AsyncSession,
    photo_id: uuid.UUID,
    user: CurrentUser,
    content: Optional[str],
) -> CommentResponse:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Comment content is required", field="content")

    photo = await get_photo_or_404(db, photo_id)

    comment = Comment(photo_id=photo_id, user_id=user.id, content=content.strip())
    db.add(comment)
    await db.flush()

    if photo.creator_id != user.id:
        await create_notification(
            db,
            user_id=photo.creator_id,
            type="comment",
            actor_id=user.id,
            photo_id=photo_id,
            comment_id=comment.id,
            message="commented on your photo",
        )

    return CommentResponse(
        id=comment.id,
        content=comment.content,
        created_at=comment.created_at,
        user=CommentAuthor(id=user.id, display_name=user.display_name, role=user.role),
    )


async def delete_comment(db: AsyncSession, comment_id: uuid.UUID, user: CurrentUser) -> None:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment", resource_id=str(comment_id))
    if comment.user_id != user.id:
        raise PermissionDeniedError("You can only delete your own comments")
    await db.execute(delete(Comment).where(Comment.id == comment_id))
    logger.info("Comment %s deleted by %s", comment_id, user.id)
