"""Create the PhotoShare schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, photos, photo_tags, comments, ratings, likes, follows,
       notifications, collections, collection_photos and reports.
How:   Generic sa.Uuid columns (native UUID on PostgreSQL) and
       TIMESTAMP WITH TIME ZONE, matching photoshare/models.

Every foreign key cascades on delete, so removing a user or photo removes
everything that hangs off it.

Rollback: downgrade() drops all tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), nullable=False)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _fk(name: str, target: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.Uuid(),
        sa.ForeignKey(f"{target}.id", ondelete="CASCADE"),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'consumer'")),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("theme", sa.String(10), nullable=False, server_default=sa.text("'light'")),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_users_created_at", "users", [sa.text("created_at DESC")])

    op.create_table(
        "photos",
        _id(),
        _fk("creator_id", "users"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("file_path", sa.String(500), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_photos_creator_id", "photos", ["creator_id"])
    op.create_index("idx_photos_created_at", "photos", [sa.text("created_at DESC")])

    op.create_table(
        "photo_tags",
        _id(),
        _fk("photo_id", "photos"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default=sa.text("'manual'")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_photo_tags_photo_id", "photo_tags", ["photo_id"])

    op.create_table(
        "comments",
        _id(),
        _fk("photo_id", "photos"),
        _fk("user_id", "users"),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_photo_id", "comments", ["photo_id"])

    op.create_table(
        "ratings",
        _id(),
        _fk("photo_id", "photos"),
        _fk("user_id", "users"),
        sa.Column("rating", sa.Integer(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("photo_id", "user_id", name="uq_ratings_photo_user"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
    )
    op.create_index("idx_ratings_photo_id", "ratings", ["photo_id"])

    op.create_table(
        "likes",
        _id(),
        _fk("photo_id", "photos"),
        _fk("user_id", "users"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_likes_photo_id", "likes", ["photo_id"])
    op.create_index("idx_likes_user_id", "likes", ["user_id"])

    op.create_table(
        "follows",
        _id(),
        _fk("follower_id", "users"),
        _fk("following_id", "users"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_follows_follower_id", "follows", ["follower_id"])
    op.create_index("idx_follows_following_id", "follows", ["following_id"])

    op.create_table(
        "notifications",
        _id(),
        _fk("user_id", "users"),
        sa.Column("type", sa.String(20), nullable=False),
        _fk("actor_id", "users", nullable=True),
        _fk("photo_id", "photos", nullable=True),
        _fk("comment_id", "comments", nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notifications_user_id", "notifications", ["user_id"])
    op.create_index("idx_notifications_user_unread", "notifications", ["user_id", "is_read"])

    op.create_table(
        "collections",
        _id(),
        _fk("user_id", "users"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_collections_user_id", "collections", ["user_id"])

    op.create_table(
        "collection_photos",
        _id(),
        _fk("collection_id", "collections"),
        _fk("photo_id", "photos"),
        _created_at("added_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("collection_id", "photo_id", name="uq_collection_photos"),
    )
    op.create_index(
        "idx_collection_photos_collection_id", "collection_photos", ["collection_id"]
    )

    op.create_table(
        "reports",
        _id(),
        _fk("reporter_id", "users"),
        _fk("photo_id", "photos", nullable=True),
        _fk("user_id", "users", nullable=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_reports_status", "reports", ["status"])


def downgrade() -> None:
    """Drops every table, children first. All data is lost."""
    for table in (
        "reports",
        "collection_photos",
        "collections",
        "notifications",
        "follows",
        "likes",
        "ratings",
        "comments",
        "photo_tags",
        "photos",
        "users",
    ):
        op.drop_table(table)
