"""
PhotoShare Backend — Comment Route Handlers
=============================================

GET/POST /api/photos/{photo_id}/comments and DELETE .../comments/{comment_id}.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import ErrorResponse, MessageResponse
from photoshare.schemas.photo import CommentCreate, CommentResponse
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import comment_service

router = APIRouter(prefix="/api/photos/{photo_id}/comments", tags=["Comments"])


@router.get(
    "",
    response_model=List[CommentResponse],
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Comments on a photo, newest first",
)
async def list_comments(
    photo_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await comment_service.list_comments(db, photo_id)


@router.post(
    "",
    status_code=201,
    response_model=CommentResponse,
    responses={
        400: {"description": "Empty comment", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Comment on a photo",
)
async def add_comment(
    photo_id: uuid.UUID,
    body: CommentCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.add_comment(db, photo_id, user, body.content)


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Comment not found", "model": ErrorResponse},
    },
    summary="Delete one of your comments",
)
async def delete_comment(
    photo_id: uuid.UUID,
    comment_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await comment_service.delete_comment(db, comment_id, user)
    return MessageResponse(message="Comment deleted")
