"""
PhotoShare Backend — Rating Service
=====================================

What:  Per-photo rating statistics and the per-user 1..5 star rating.
How:   POST is an upsert on the (photo_id, user_id) unique constraint:

           INSERT ... ON CONFLICT (photo_id, user_id)
           DO UPDATE SET rating = :rating, created_at = now()
           RETURNING id, rating, created_at

       followed by a second statement recomputing average and count, so the
       response always reflects the caller's own write.

The INSERT construct is dialect specific (PostgreSQL in production, SQLite
in tests); both support ON CONFLICT ... DO UPDATE ... RETURNING.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.exceptions import ValidationError
from photoshare.models import Rating
from photoshare.schemas.photo import (
    MyRatingResponse,
    PhotoRatingStats,
    RatingResponse,
    RatingStats,
)
from photoshare.security import CurrentUser
from photoshare.services.photo_service import get_photo_or_404

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def validate_rating(value: Any) -> int:
    """Accepts integral numbers 1..5; 4.0 becomes 4, booleans and 3.5 are rejected."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
        raise ValidationError(
            "Rating must be an integer between 1 and 5",
            field="rating",
            context={"value": repr(value)},
        )
    return value


async def get_rating_stats(db: AsyncSession, photo_id: uuid.UUID) -> RatingStats:
    await get_photo_or_404(db, photo_id)
    star_counts = [
        func.count(case((Rating.rating == star, 1))).label(f"star_{star}")
        for star in range(1, 6)
    ]
    row = (
        await db.execute(
            select(
                func.coalesce(func.avg(Rating.rating), 0).label("average"),
                func.count(Rating.id).label("count"),
                *star_counts,
            ).where(Rating.photo_id == photo_id)
        )
    ).one()
    return RatingStats(
        average=float(row.average or 0),
        count=row.count or 0,
        distribution={str(star): getattr(row, f"star_{star}") or 0 for star in range(1, 6)},
    )


async def rate_photo(
    db: AsyncSession,
    photo_id: uuid.UUID,
    user: CurrentUser,
    value: Any,
) -> RatingResponse:
    rating = validate_rating(value)
    await get_photo_or_404(db, photo_id)

    insert = _INSERTS[db.get_bind().dialect.name]
    now = datetime.now(timezone.utc)
    stmt = insert(Rating).values(
        id=uuid.uuid4(),
        photo_id=photo_id,
        user_id=user.id,
        rating=rating,
        created_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Rating.photo_id, Rating.user_id],
        set_={"rating": stmt.excluded.rating, "created_at": stmt.excluded.created_at},
    ).returning(Rating.id, Rating.rating, Rating.created_at)
    saved = (await db.execute(stmt)).one()

    stats = (
        await db.execute(
            select(
                func.coalesce(func.avg(Rating.rating), 0).label("average"),
                func.count(Rating.id).label("count"),
            ).where(Rating.photo_id == photo_id)
        )
    ).one()

    return RatingResponse(
        id=saved.id,
        rating=saved.rating,
        created_at=saved.created_at,
        photo_stats=PhotoRatingStats(average=float(stats.average or 0), count=stats.count or 0),
    )


async def get_my_rating(
    db: AsyncSession, photo_id: uuid.UUID, user: CurrentUser
) -> MyRatingResponse:
    rating = await db.scalar(
        select(Rating.rating).where(Rating.photo_id == photo_id, Rating.user_id == user.id)
    )
    return MyRatingResponse(rating=rating)
