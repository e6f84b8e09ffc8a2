"""
PhotoShare Backend — Photo Route Handlers
===========================================

What:  Gallery listing, search, trending, detail, image redirect, upload and delete.
Who:   Gallery, photo view and creator dashboard pages of the frontend.

Route order matters: /search and /trending are declared before /{photo_id},
otherwise FastAPI would try to parse "search" as a UUID and answer 400.

Upload Request Flow:
    1. Client sends multipart/form-data: image, title, caption, location, tags
    2. photo_service validates fields, stores the blob, inserts rows, commits
    3. Photo cache is cleared and an image-processing message is queued
    4. 201 Created with {id, url, message}
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.common import ErrorResponse, MessageResponse
from photoshare.schemas.photo import PhotoDetail, PhotoPage, PhotoUploadResponse
from photoshare.security import CurrentUser, get_current_user, get_optional_user
from photoshare.services import photo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/photos", tags=["Photos"])


@router.get(
    "",
    response_model=PhotoPage,
    summary="List photos, newest first",
    description="Paginated gallery. Pages are cached for 60 seconds when Redis is configured.",
)
async def list_photos(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoPage:
    return await photo_service.list_photos(db, page, limit)


@router.get(
    "/search",
    response_model=PhotoPage,
    summary="Search photos",
    description=(
        "Case-insensitive substring search. `q` matches title or caption, "
        "`location` the location and `tag` any tag name. Filters combine with AND."
    ),
)
async def search_photos(
    q: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoPage:
    return await photo_service.search_photos(db, page, limit, q=q, location=location, tag=tag)


@router.get(
    "/trending",
    response_model=PhotoPage,
    summary="Photos ordered by engagement",
)
async def trending_photos(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoPage:
    return await photo_service.trending_photos(db, page, limit)


@router.get(
    "/{photo_id}",
    response_model=PhotoDetail,
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Photo detail",
    description="Includes tags, and the caller's rating and like when a token is sent.",
)
async def get_photo(
    photo_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoDetail:
    return await photo_service.get_photo(db, photo_id, user)


@router.get(
    "/{photo_id}/image",
    status_code=302,
    response_class=RedirectResponse,
    responses={404: {"description": "Photo not found", "model": ErrorResponse}},
    summary="Redirect to the stored image",
)
async def get_photo_image(
    photo_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> RedirectResponse:
    url = await photo_service.get_image_url(db, photo_id)
    return RedirectResponse(url, status_code=302)


@router.post(
    "",
    status_code=201,
    response_model=PhotoUploadResponse,
    responses={
        400: {"description": "Missing field, invalid file or invalid tags", "model": ErrorResponse},
        401: {"description": "No token", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Upload a photo",
    description=(
        "multipart/form-data with `image` (JPEG, PNG, GIF or WebP, max 10MB), "
        "`title`, optional `caption`, `location` and `tags` (JSON array of strings)."
    ),
)
async def upload_photo(
    image: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoUploadResponse:
    try:
        return await photo_service.create_photo(
            db,
            user,
            image,
            title,
            caption=caption,
            location=location,
            tags=tags,
        )
    finally:
        if image is not None:
            await image.close()


@router.delete(
    "/{photo_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the creator", "model": ErrorResponse},
        404: {"description": "Photo not found", "model": ErrorResponse},
    },
    summary="Delete one of your photos",
)
async def delete_photo(
    photo_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await photo_service.delete_photo(db, photo_id, user)
    return MessageResponse(message="Photo deleted successfully")
