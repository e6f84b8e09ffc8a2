"""
PhotoShare Backend — Notification Route Handlers
==================================================

The caller's inbox under /api/notifications. Every route requires a token and
only ever touches the caller's own notifications.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import SuccessResponse
from photoshare.schemas.notification import NotificationList, UnreadCount
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationList, summary="Your notifications, newest first")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationList:
    return await notification_service.list_notifications(db, user.id, page, limit)


@router.get("/unread-count", response_model=UnreadCount, summary="Number of unread notifications")
async def unread_count(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UnreadCount:
    return UnreadCount(count=await notification_service.count_unread(db, user.id))


@router.patch("/read-all", response_model=SuccessResponse, summary="Mark everything read")
async def mark_all_read(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await notification_service.mark_all_read(db, user.id)
    return SuccessResponse()


@router.patch("/{notification_id}/read", response_model=SuccessResponse, summary="Mark one read")
async def mark_read(
    notification_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await notification_service.mark_read(db, user.id, notification_id)
    return SuccessResponse()


@router.delete("/{notification_id}", response_model=SuccessResponse, summary="Delete one")
async def delete_notification(
    notification_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await notification_service.delete_notification(db, user.id, notification_id)
    return SuccessResponse()
