"""
PhotoShare Backend — Admin Service
====================================

What:  Moderation and user management for administrators.
How:   `require_admin` re-reads users.is_admin on every request instead of
       trusting a token claim, so revoking admin rights takes effect at once.

Deleting a user cascades through every table that references them; their
stored blobs are removed afterwards on a best-effort basis.
"""

import logging
import uuid

from fastapi import Depends
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from photoshare.database import get_db_session
from photoshare.exceptions import PermissionDeniedError, ValidationError
from photoshare.models import Comment, Photo, Report, User
from photoshare.models.report import REPORT_STATUSES
from photoshare.models.user import USER_ROLES
from photoshare.schemas.admin import (
    AdminCounts,
    AdminStats,
    AdminUserList,
    AdminUserRow,
    AdminUserUpdate,
    RecentPhoto,
    RecentUser,
    ReportList,
    ReportRow,
)
from photoshare.schemas.common import Pagination
from photoshare.security import CurrentUser, get_current_user
from photoshare.services import photo_service
from photoshare.services.cache_service import cache_service
from photoshare.services.storage_service import storage_service

logger = logging.getLogger(__name__)


async def require_admin(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CurrentUser:
    """Dependency: the caller must exist and have is_admin set."""
    is_admin = await db.scalar(select(User.is_admin).where(User.id == user.id))
    if not is_admin:
        raise PermissionDeniedError("Admin access required", context={"user_id": str(user.id)})
    return user


async def _count(db: AsyncSession, model, *criteria) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*criteria))


async def get_stats(db: AsyncSession) -> AdminStats:
    counts = AdminCounts(
        total_users=await _count(db, User),
        total_photos=await _count(db, Photo),
        total_comments=await _count(db, Comment),
        pending_reports=await _count(db, Report, Report.status == "pending"),
    )

    recent_users = (
        await db.execute(
            select(User.id, User.display_name, User.email, User.created_at)
            .order_by(User.created_at.desc())
            .limit(5)
        )
    ).all()
    recent_photos = (
        await db.execute(
            select(Photo.id, Photo.title, Photo.created_at, User.display_name.label("creator"))
            .join(User, Photo.creator_id == User.id)
            .order_by(Photo.created_at.desc())
            .limit(5)
        )
    ).all()

    return AdminStats(
        stats=counts,
        recent_users=[RecentUser.model_validate(row) for row in recent_users],
        recent_photos=[RecentPhoto.model_validate(row) for row in recent_photos],
    )


async def list_users(db: AsyncSession, page: int, limit: int) -> AdminUserList:
    photo_count = (
        select(func.count())
        .select_from(Photo)
        .where(Photo.creator_id == User.id)
        .scalar_subquery()
    )
    rows = (
        await db.execute(
            select(
                User.id,
                User.email,
                User.display_name,
                User.role,
                User.is_admin,
                User.created_at,
                photo_count.label("photo_count"),
            )
            .order_by(User.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
    ).all()

    return AdminUserList(
        users=[AdminUserRow.model_validate(row) for row in rows],
        pagination=Pagination(page=page, limit=limit, total=await _count(db, User)),
    )


async def update_user(db: AsyncSession, user_id: uuid.UUID, body: AdminUserUpdate) -> None:
    values = {}
    if body.role:
        if body.role not in USER_ROLES:
            raise ValidationError(
                f"Role must be one of: {', '.join(USER_ROLES)}", field="role"
            )
        values["role"] = body.role
    if body.is_admin is not None:
        values["is_admin"] = body.is_admin

    if not values:
        raise ValidationError("No updates provided")

    await db.execute(update(User).where(User.id == user_id).values(**values))
    logger.info("Admin updated user %s: %s", user_id, values)


async def delete_user(db: AsyncSession, user_id: uuid.UUID, admin: CurrentUser) -> None:
    if user_id == admin.id:
        raise ValidationError("Cannot delete yourself")

    file_paths = (
        await db.scalars(select(Photo.file_path).where(Photo.creator_id == user_id))
    ).all()

    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()

    for file_path in file_paths:
        await storage_service.delete(file_path)
    if file_paths:
        await cache_service.clear_photo_cache()
    logger.info("Admin %s deleted user %s (%d photos)", admin.id, user_id, len(file_paths))


async def list_reports(db: AsyncSession, status: str, page: int, limit: int) -> ReportList:
    reporter = aliased(User, name="reporter")
    reported = aliased(User, name="reported_user")
    rows = (
        await db.execute(
            select(
                Report.id,
                Report.reporter_id,
                Report.photo_id,
                Report.user_id,
                Report.type,
                Report.reason,
                Report.status,
                Report.created_at,
                reporter.display_name.label("reporter_name"),
                Photo.title.label("photo_title"),
                Photo.file_path.label("photo_path"),
                reported.display_name.label("reported_user_name"),
            )
            .join(reporter, Report.reporter_id == reporter.id)
            .outerjoin(Photo, Report.photo_id == Photo.id)
            .outerjoin(reported, Report.user_id == reported.id)
            .where(Report.status == status)
            .order_by(Report.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
    ).all()

    reports = []
    for row in rows:
        report = ReportRow.model_validate(row)
        if report.photo_path:
            report.photo_path = storage_service.resolve_url(report.photo_path)
        reports.append(report)

    return ReportList(
        reports=reports,
        pagination=Pagination(
            page=page, limit=limit, total=await _count(db, Report, Report.status == status)
        ),
    )


async def update_report(db: AsyncSession, report_id: uuid.UUID, status: str) -> None:
    if status not in REPORT_STATUSES:
        raise ValidationError("Invalid status", field="status")
    await db.execute(update(Report).where(Report.id == report_id).values(status=status))


async def delete_photo(db: AsyncSession, photo_id: uuid.UUID, admin: CurrentUser) -> None:
    """Removes any photo. Already-deleted photos are not an error."""
    photo = await db.get(Photo, photo_id)
    if photo is None:
        logger.info("Admin delete of missing photo %s ignored", photo_id)
        return
    await photo_service.remove_photo(db, photo)
    logger.info("Admin %s removed photo %s", admin.id, photo_id)
