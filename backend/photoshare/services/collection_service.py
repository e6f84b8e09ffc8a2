"""
PhotoShare Backend — Collection Service
=========================================

What:  User-curated photo collections.

Visibility:
    owner      always sees and edits the collection
    others     may read a public collection; a private one answers 403
    mutations  only the owner; anything else answers 403 "Not your collection"

Photos inside a collection are listed by added_at, newest first. The cover of
a collection is the most recently added photo.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import delete, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from photoshare.models import Collection, CollectionPhoto, Like, Photo, Rating, User
from photoshare.schemas.collection import (
    CollectionCreate,
    CollectionCreated,
    CollectionDetail,
    CollectionList,
    CollectionPhotoItem,
    CollectionSummary,
)
from photoshare.schemas.common import UserRef
from photoshare.security import CurrentUser
from photoshare.services.photo_service import get_photo_or_404
from photoshare.services.storage_service import storage_service

logger = logging.getLogger(__name__)


async def _get_owned_collection(
    db: AsyncSession, collection_id: uuid.UUID, user: CurrentUser
) -> Collection:
    collection = await db.get(Collection, collection_id)
    if collection is None:
        raise NotFoundError("Collection", resource_id=str(collection_id))
    if collection.user_id != user.id:
        raise PermissionDeniedError(
            "Not your collection",
            context={"collection_id": str(collection_id), "user_id": str(user.id)},
        )
    return collection


async def list_collections(db: AsyncSession, user: CurrentUser) -> CollectionList:
    photo_count = (
        select(func.count())
        .select_from(CollectionPhoto)
        .where(CollectionPhoto.collection_id == Collection.id)
        .scalar_subquery()
    )
    cover = (
        select(Photo.file_path)
        .join(CollectionPhoto, CollectionPhoto.photo_id == Photo.id)
        .where(CollectionPhoto.collection_id == Collection.id)
        .order_by(CollectionPhoto.added_at.desc())
        .limit(1)
        .scalar_subquery()
    )
    rows = (
        await db.execute(
            select(
                Collection.id,
                Collection.name,
                Collection.description,
                Collection.is_public,
                Collection.created_at,
                photo_count.label("photo_count"),
                cover.label("cover_photo"),
            )
            .where(Collection.user_id == user.id)
            .order_by(Collection.created_at.desc())
        )
    ).all()

    return CollectionList(
        collections=[
            CollectionSummary(
                id=row.id,
                name=row.name,
                description=row.description,
                is_public=row.is_public,
                created_at=row.created_at,
                photo_count=row.photo_count,
                cover_photo=storage_service.resolve_url(row.cover_photo)
                if row.cover_photo
                else None,
            )
            for row in rows
        ]
    )


async def create_collection(
    db: AsyncSession, user: CurrentUser, body: CollectionCreate
) -> CollectionCreated:
    if not body.name or not body.name.strip():
        raise ValidationError("Name is required", field="name")

    collection = Collection(
        user_id=user.id,
        name=body.name.strip(),
        description=body.description or None,
        is_public=True if body.is_public is None else body.is_public,
    )
    db.add(collection)
    await db.flush()
    logger.info("Collection %s created by %s", collection.id, user.id)
    return CollectionCreated(id=collection.id)


async def get_collection(
    db: AsyncSession, collection_id: uuid.UUID, viewer: Optional[CurrentUser] = None
) -> CollectionDetail:
    row = (
        await db.execute(
            select(Collection, User.display_name)
            .join(User, Collection.user_id == User.id)
            .where(Collection.id == collection_id)
        )
    ).first()
    if row is None:
        raise NotFoundError("Collection", resource_id=str(collection_id))
    collection, owner_name = row

    is_owner = viewer is not None and viewer.id == collection.user_id
    if not collection.is_public and not is_owner:
        raise PermissionDeniedError(
            "Collection is private", context={"collection_id": str(collection_id)}
        )

    # Correlated subqueries keep the ratings and likes fan-out out of the join
    avg_rating = (
        select(func.coalesce(func.avg(Rating.rating), 0))
        .where(Rating.photo_id == Photo.id)
        .scalar_subquery()
    )
    like_count = (
        select(func.count(distinct(Like.id))).where(Like.photo_id == Photo.id).scalar_subquery()
    )
    photo_rows = (
        await db.execute(
            select(
                Photo.id,
                Photo.title,
                Photo.file_path,
                Photo.created_at,
                User.id.label("creator_id"),
                User.display_name.label("creator_name"),
                avg_rating.label("avg_rating"),
                like_count.label("like_count"),
            )
            .select_from(CollectionPhoto)
            .join(Photo, CollectionPhoto.photo_id == Photo.id)
            .join(User, Photo.creator_id == User.id)
            .where(CollectionPhoto.collection_id == collection_id)
            .order_by(CollectionPhoto.added_at.desc())
        )
    ).all()

    return CollectionDetail(
        id=collection.id,
        name=collection.name,
        description=collection.description,
        is_public=collection.is_public,
        created_at=collection.created_at,
        owner=UserRef(id=collection.user_id, display_name=owner_name),
        is_owner=is_owner,
        photos=[
            CollectionPhotoItem(
                id=p.id,
                title=p.title,
                file_path=storage_service.resolve_url(p.file_path),
                created_at=p.created_at,
                creator=UserRef(id=p.creator_id, display_name=p.creator_name),
                avg_rating=float(p.avg_rating or 0),
                like_count=p.like_count or 0,
            )
            for p in photo_rows
        ],
    )


async def add_photo(
    db: AsyncSession,
    collection_id: uuid.UUID,
    photo_id: Optional[uuid.UUID],
    user: CurrentUser,
) -> None:
    """Adds a photo to the caller's collection; adding it twice is a no-op."""
    await _get_owned_collection(db, collection_id, user)
    if photo_id is None:
        raise NotFoundError("Photo")
    await get_photo_or_404(db, photo_id)

    existing = await db.scalar(
        select(CollectionPhoto.id).where(
            CollectionPhoto.collection_id == collection_id,
            CollectionPhoto.photo_id == photo_id,
        )
    )
    if existing is not None:
        logger.debug("Photo %s already in collection %s", photo_id, collection_id)
        return

    db.add(CollectionPhoto(collection_id=collection_id, photo_id=photo_id))
    await db.flush()


async def remove_photo(
    db: AsyncSession, collection_id: uuid.UUID, photo_id: uuid.UUID, user: CurrentUser
) -> None:
    await _get_owned_collection(db, collection_id, user)
    await db.execute(
        delete(CollectionPhoto).where(
            CollectionPhoto.collection_id == collection_id,
            CollectionPhoto.photo_id == photo_id,
        )
    )


async def delete_collection(db: AsyncSession, collection_id: uuid.UUID, user: CurrentUser) -> None:
    result = await db.execute(
        delete(Collection).where(Collection.id == collection_id, Collection.user_id == user.id)
    )
    if result.rowcount == 0:
        raise NotFoundError(
            "Collection",
            resource_id=str(collection_id),
            message="Collection not found or not yours",
        )
    logger.info("Collection %s deleted by %s", collection_id, user.id)
