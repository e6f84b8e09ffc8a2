"""Schemas for /api/admin."""

import uuid
from datetime import datetime
from typing import List, Optional

from photoshare.schemas.common import CamelModel, Pagination


class AdminCounts(CamelModel):
    total_users: int
    total_photos: int
    total_comments: int
    pending_reports: int


class RecentUser(CamelModel):
    id: uuid.UUID
    display_name: str
    email: str
    created_at: datetime


class RecentPhoto(CamelModel):
    id: uuid.UUID
    title: str
    created_at: datetime
    creator: str


class AdminStats(CamelModel):
    stats: AdminCounts
    recent_users: List[RecentUser]
    recent_photos: List[RecentPhoto]


class AdminUserRow(CamelModel):
    id: uuid.UUID
    email: str
    display_name: str
    role: str
    is_admin: bool
    created_at: datetime
    photo_count: int


class AdminUserList(CamelModel):
    users: List[AdminUserRow]
    pagination: Pagination


class AdminUserUpdate(CamelModel):
    role: Optional[str] = None
    is_admin: Optional[bool] = None


class ReportRow(CamelModel):
    id: uuid.UUID
    reporter_id: uuid.UUID
    photo_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    type: str
    reason: Optional[str] = None
    status: str
    created_at: datetime
    reporter_name: str
    photo_title: Optional[str] = None
    photo_path: Optional[str] = None
    reported_user_name: Optional[str] = None


class ReportList(CamelModel):
    reports: List[ReportRow]
    pagination: Pagination


class ReportUpdate(CamelModel):
    status: Optional[str] = None
