"""
PhotoShare Backend — User Model
=================================

What:  The `users` table: credentials, profile fields and the two flags that
       drive authorization (role and is_admin).

Roles:
    creator   seeded accounts and users promoted by an admin
    consumer  default for self-registration
is_admin is independent of role and is re-read from this table by admin routes,
so revoking it takes effect without waiting for tokens to expire.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from photoshare.database import Base, utcnow

USER_ROLES = ("creator", "consumer")
USER_THEMES = ("light", "dark")


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Stored as given; lookups are exact-match like the login form sends them
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="consumer",
        server_default=text("'consumer'"),
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    theme: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="light",
        server_default=text("'light'"),
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_users_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
