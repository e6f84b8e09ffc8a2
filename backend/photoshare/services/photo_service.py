"""
PhotoShare Backend — Photo Service
====================================

What:  Listing, searching, reading, uploading and deleting photos.
Why:   Every photo-shaped response (gallery, search, trending, profile pages,
       liked photos) shares one aggregate query so counts are computed the same
       way everywhere.
How:   `aggregate_photo_query()` joins photos → users and LEFT JOINs ratings,
       comments and likes, grouped per photo:

           avg_rating    = COALESCE(AVG(ratings.rating), 0)
           rating_count  = COUNT(DISTINCT ratings.id)
           comment_count = COUNT(DISTINCT comments.id)
           like_count    = COUNT(DISTINCT likes.id)

       The join fans out rows (ratings × comments × likes) but every rating is
       repeated the same number of times, so the average is unaffected and the
       DISTINCT counts stay exact.

Pagination:
    One query for the page (LIMIT/OFFSET) and a separate COUNT query for the
    total; totalPages = ceil(total / limit).

Caching (see cache_service):
    list pages       cached for every caller (no per-user fields)
    single photo     cached only for anonymous callers
    create / delete  commit first, then clear photos:*, so a concurrent read
                     cannot re-cache the pre-change state
"""

import json
import logging
import uuid
from typing import Any, List, Optional

from fastapi import UploadFile
from sqlalchemy import Select, delete, distinct, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from photoshare.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from photoshare.models import Comment, Like, Photo, PhotoTag, Rating, User
from photoshare.schemas.common import PagePagination, UserRef
from photoshare.schemas.photo import (
    PhotoDetail,
    PhotoPage,
    PhotoSummary,
    PhotoUploadResponse,
)
from photoshare.security import CurrentUser
from photoshare.services.cache_service import cache_service, photo_list_key, photo_single_key
from photoshare.services.queue_service import send_image_processing_message
from photoshare.services.storage_service import storage_service

logger = logging.getLogger(__name__)

_avg_rating = func.coalesce(func.avg(Rating.rating), 0)
_rating_count = func.count(distinct(Rating.id))
_comment_count = func.count(distinct(Comment.id))
_like_count = func.count(distinct(Like.id))


def aggregate_photo_query(liked_by: Optional[uuid.UUID] = None) -> Select:
    """
    Base SELECT for photo summaries.

    With `liked_by`, the query starts from that user's likes instead of from
    photos, and is ordered by when the like happened (most recent first).
    Callers add filters, ordering and LIMIT/OFFSET.
    """
    columns = (
        Photo.id,
        Photo.title,
        Photo.caption,
        Photo.location,
        Photo.file_path,
        Photo.created_at,
        User.id.label("creator_id"),
        User.display_name.label("creator_name"),
        _avg_rating.label("avg_rating"),
        _rating_count.label("rating_count"),
        _comment_count.label("comment_count"),
        _like_count.label("like_count"),
    )

    if liked_by is None:
        query = select(*columns).select_from(Photo).group_by(Photo.id, User.id)
    else:
        liker = aliased(Like, name="liker")
        query = (
            select(*columns)
            .select_from(liker)
            .join(Photo, liker.photo_id == Photo.id)
            .where(liker.user_id == liked_by)
            .group_by(Photo.id, User.id, liker.created_at)
            .order_by(liker.created_at.desc())
        )

    return (
        query.join(User, Photo.creator_id == User.id)
        .outerjoin(Rating, Rating.photo_id == Photo.id)
        .outerjoin(Comment, Comment.photo_id == Photo.id)
        .outerjoin(Like, Like.photo_id == Photo.id)
    )


def summary_from_row(row: Any) -> PhotoSummary:
    return PhotoSummary(
        id=row.id,
        title=row.title,
        caption=row.caption,
        location=row.location,
        file_path=storage_service.resolve_url(row.file_path),
        created_at=row.created_at,
        creator=UserRef(id=row.creator_id, display_name=row.creator_name),
        avg_rating=float(row.avg_rating or 0),
        rating_count=row.rating_count or 0,
        comment_count=row.comment_count or 0,
        like_count=row.like_count or 0,
    )


async def fetch_photo_page(
    db: AsyncSession,
    query: Select,
    count_query: Select,
    page: int,
    limit: int,
) -> PhotoPage:
    """Runs a page query plus its COUNT query and wraps both in a PhotoPage."""
    rows = (await db.execute(query.limit(limit).offset((page - 1) * limit))).all()
    total = (await db.execute(count_query)).scalar_one()
    return PhotoPage(
        photos=[summary_from_row(row) for row in rows],
        pagination=PagePagination.build(page=page, limit=limit, total=total),
    )


async def get_photo_or_404(db: AsyncSession, photo_id: uuid.UUID) -> Photo:
    photo = await db.get(Photo, photo_id)
    if photo is None:
        raise NotFoundError("Photo", resource_id=str(photo_id))
    return photo


# ══════════════════════════════════════════════════════════════════════════
# Reads
# ══════════════════════════════════════════════════════════════════════════

async def list_photos(db: AsyncSession, page: int, limit: int) -> PhotoPage:
    cache_key = photo_list_key(page, limit)
    cached = await cache_service.get(cache_key)
    if cached:
        return PhotoPage.model_validate(cached)

    result = await fetch_photo_page(
        db,
        aggregate_photo_query().order_by(Photo.created_at.desc()),
        select(func.count()).select_from(Photo),
        page,
        limit,
    )
    await cache_service.set(cache_key, result.model_dump(mode="json", by_alias=True))
    return result


async def search_photos(
    db: AsyncSession,
    page: int,
    limit: int,
    q: Optional[str] = None,
    location: Optional[str] = None,
    tag: Optional[str] = None,
) -> PhotoPage:
    """
    Case-insensitive substring search; all given filters must match.

        q         title or caption
        location  location
        tag       any tag name on the photo
    """
    filters = []
    if q:
        pattern = f"%{q}%"
        filters.append(or_(Photo.title.ilike(pattern), Photo.caption.ilike(pattern)))
    if location:
        filters.append(Photo.location.ilike(f"%{location}%"))
    if tag:
        filters.append(
            exists().where(PhotoTag.photo_id == Photo.id, PhotoTag.name.ilike(f"%{tag}%"))
        )

    return await fetch_photo_page(
        db,
        aggregate_photo_query().where(*filters).order_by(Photo.created_at.desc()),
        select(func.count()).select_from(Photo).where(*filters),
        page,
        limit,
    )


async def trending_photos(db: AsyncSession, page: int, limit: int) -> PhotoPage:
    """Photos ordered by likes + ratings + comments, newest first on ties."""
    engagement = _like_count + _rating_count + _comment_count
    return await fetch_photo_page(
        db,
        aggregate_photo_query().order_by(engagement.desc(), Photo.created_at.desc()),
        select(func.count()).select_from(Photo),
        page,
        limit,
    )


async def get_photo(
    db: AsyncSession,
    photo_id: uuid.UUID,
    user: Optional[CurrentUser] = None,
) -> PhotoDetail:
    cache_key = photo_single_key(photo_id)
    if user is None:
        cached = await cache_service.get(cache_key)
        if cached:
            return PhotoDetail.model_validate(cached)

    row = (await db.execute(aggregate_photo_query().where(Photo.id == photo_id))).first()
    if row is None:
        raise NotFoundError("Photo", resource_id=str(photo_id))

    tags = (
        await db.scalars(select(PhotoTag.name).where(PhotoTag.photo_id == photo_id))
    ).all()

    user_rating = None
    user_liked = False
    if user is not None:
        user_rating = await db.scalar(
            select(Rating.rating).where(Rating.photo_id == photo_id, Rating.user_id == user.id)
        )
        user_liked = (
            await db.scalar(
                select(Like.id).where(Like.photo_id == photo_id, Like.user_id == user.id).limit(1)
            )
        ) is not None

    summary = summary_from_row(row)
    detail = PhotoDetail(
        **summary.model_dump(exclude={"comment_count"}),
        tags=list(tags),
        user_rating=user_rating,
        user_liked=user_liked,
    )

    if user is None:
        await cache_service.set(cache_key, detail.model_dump(mode="json", by_alias=True))
    return detail


async def get_image_url(db: AsyncSession, photo_id: uuid.UUID) -> str:
    photo = await get_photo_or_404(db, photo_id)
    return storage_service.resolve_url(photo.file_path)


# ══════════════════════════════════════════════════════════════════════════
# Writes
# ══════════════════════════════════════════════════════════════════════════

def parse_tags(raw: Optional[str]) -> List[str]:
    """
    Parses the multipart `tags` field: a JSON array of strings.

    Blank entries are dropped and duplicates collapsed; an empty or missing
    field means no tags.
    """
    if raw is None or not raw.strip():
        return []
    try:
        values = json.loads(raw)
    except ValueError:
        raise ValidationError("Tags must be a JSON array of strings", field="tags")
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ValidationError("Tags must be a JSON array of strings", field="tags")

    tags: List[str] = []
    for value in values:
        name = value.strip()
        if name and name not in tags:
            tags.append(name)
    return tags


async def create_photo(
    db: AsyncSession,
    user: CurrentUser,
    image: Optional[UploadFile],
    title: Optional[str],
    caption: Optional[str] = None,
    location: Optional[str] = None,
    tags: Optional[str] = None,
) -> PhotoUploadResponse:
    """
    Upload workflow:
        1. Validate form fields (image present, title present, tags parse)
        2. Validate and store the blob
        3. Insert photo + manual tags and commit
           (the stored blob is removed again if the insert fails)
        4. Clear the photo cache and enqueue vision tagging
    """
    if image is None or not image.filename:
        raise ValidationError("Image file is required", field="image")
    if not title or not title.strip():
        raise ValidationError("Title is required", field="title")
    tag_names = parse_tags(tags)

    content = await image.read()
    blob = await storage_service.upload(image.filename, content)

    try:
        photo = Photo(
            creator_id=user.id,
            title=title.strip(),
            caption=caption or None,
            location=location or None,
            file_path=blob.name,
        )
        db.add(photo)
        await db.flush()
        db.add_all(PhotoTag(photo_id=photo.id, name=name, source="manual") for name in tag_names)
        await db.commit()
    except Exception:
        await db.rollback()
        await storage_service.delete(blob.name)
        raise

    logger.info("Photo %s uploaded by %s with %d tags", photo.id, user.id, len(tag_names))

    await cache_service.clear_photo_cache()
    await send_image_processing_message(photo.id, blob.url)

    return PhotoUploadResponse(id=photo.id, url=blob.url)


async def remove_photo(db: AsyncSession, photo: Photo) -> None:
    """Deletes blob and row (cascading), commits, then clears the photo cache."""
    await storage_service.delete(photo.file_path)
    await db.execute(delete(Photo).where(Photo.id == photo.id))
    await db.commit()
    await cache_service.clear_photo_cache()
    logger.info("Photo %s deleted", photo.id)


async def delete_photo(db: AsyncSession, photo_id: uuid.UUID, user: CurrentUser) -> None:
    photo = await get_photo_or_404(db, photo_id)
    if photo.creator_id != user.id:
        raise PermissionDeniedError(
            "You can only delete your own photos",
            context={"photo_id": str(photo_id), "user_id": str(user.id)},
        )
    await remove_photo(db, photo)
