"""
PhotoShare Backend — Admin Route Handlers
===========================================

What:  Dashboard stats, user management, report triage and photo removal.
How:   Every route depends on `require_admin`, which re-checks users.is_admin
       in the database (403 "Admin access required" otherwise).
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.admin import (
    AdminStats,
    AdminUserList,
    AdminUserUpdate,
    ReportList,
    ReportUpdate,
)
from photoshare.schemas.common import ErrorResponse, SuccessResponse
from photoshare.security import CurrentUser
from photoshare.services import admin_service
from photoshare.services.admin_service import require_admin

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={403: {"description": "Admin access required", "model": ErrorResponse}},
)


@router.get("/stats", response_model=AdminStats, summary="Dashboard counts and recent activity")
async def stats(
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminStats:
    return await admin_service.get_stats(db)


@router.get("/users", response_model=AdminUserList, summary="All users, newest first")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdminUserList:
    return await admin_service.list_users(db, page, limit)


@router.patch(
    "/users/{user_id}",
    response_model=SuccessResponse,
    responses={400: {"description": "No updates or unknown role", "model": ErrorResponse}},
    summary="Change a user's role or admin flag",
)
async def update_user(
    user_id: uuid.UUID,
    body: AdminUserUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await admin_service.update_user(db, user_id, body)
    return SuccessResponse()


@router.delete(
    "/users/{user_id}",
    response_model=SuccessResponse,
    responses={400: {"description": "Cannot delete yourself", "model": ErrorResponse}},
    summary="Delete a user and everything they own",
)
async def delete_user(
    user_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await admin_service.delete_user(db, user_id, admin)
    return SuccessResponse()


@router.get("/reports", response_model=ReportList, summary="Reports filtered by status")
async def list_reports(
    status: str = Query("pending"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ReportList:
    return await admin_service.list_reports(db, status, page, limit)


@router.patch(
    "/reports/{report_id}",
    response_model=SuccessResponse,
    responses={400: {"description": "Invalid status", "model": ErrorResponse}},
    summary="Set a report's status",
)
async def update_report(
    report_id: uuid.UUID,
    body: ReportUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await admin_service.update_report(db, report_id, body.status)
    return SuccessResponse()


@router.delete("/photos/{photo_id}", response_model=SuccessResponse, summary="Remove any photo")
async def delete_photo(
    photo_id: uuid.UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await admin_service.delete_photo(db, photo_id, admin)
    return SuccessResponse()
