"""
PhotoShare Backend — Photo and Engagement Models
==================================================

What:  `photos` plus the rows that hang off a photo: tags, comments, ratings, likes.
Why:   These tables are always aggregated together (avg rating, counts), so they
       live in one module next to the table they reference.

Blob reference:
    photos.file_path holds the blob name (e.g. "3f2a....jpg"), not a URL.
    The storage backend turns it into a URL when a response is shaped. Rows
    imported from elsewhere may already hold a full http(s) URL; those pass
    through untouched.

Cascades:
    Deleting a photo removes its tags, comments, ratings, likes, collection
    entries and notifications via ON DELETE CASCADE.

Uniqueness:
    ratings   UNIQUE (photo_id, user_id): the upsert target
    likes     no constraint; the like service checks before inserting, so two
              concurrent likes from one user can both land
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from photoshare.database import Base, utcnow

TAG_SOURCES = ("manual", "vision")


def _created_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


class Photo(Base):
    __tablename__ = "photos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    caption: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        Index("idx_photos_creator_id", "creator_id"),
        Index("idx_photos_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, title='{self.title}')>"


class PhotoTag(Base):
    """A label on a photo; `manual` from the uploader, `vision` from the tagging worker."""

    __tablename__ = "photo_tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    source: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="manual",
        server_default=text("'manual'"),
    )

    __table_args__ = (
        Index("idx_photo_tags_photo_id", "photo_id"),
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        Index("idx_comments_photo_id", "photo_id"),
    )


class Rating(Base):
    __tablename__ = "ratings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        UniqueConstraint("photo_id", "user_id", name="uq_ratings_photo_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
        Index("idx_ratings_photo_id", "photo_id"),
    )


class Like(Base):
    __tablename__ = "likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        Index("idx_likes_photo_id", "photo_id"),
        Index("idx_likes_user_id", "user_id"),
    )
