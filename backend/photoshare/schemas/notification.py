"""Schemas for /api/notifications."""

import uuid
from datetime import datetime
from typing import List, Optional

from photoshare.schemas.common import CamelModel, Pagination


class NotificationActor(CamelModel):
    id: uuid.UUID
    display_name: str
    avatar_url: Optional[str] = None


class NotificationPhoto(CamelModel):
    id: uuid.UUID
    title: str
    file_path: str


class NotificationItem(CamelModel):
    id: uuid.UUID
    type: str
    message: Optional[str] = None
    is_read: bool
    created_at: datetime
    actor: Optional[NotificationActor] = None
    photo: Optional[NotificationPhoto] = None


class NotificationList(CamelModel):
    notifications: List[NotificationItem]
    pagination: Pagination
    unread_count: int


class UnreadCount(CamelModel):
    count: int
