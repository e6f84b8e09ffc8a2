"""Schemas for /api/users and /api/follows."""

import uuid
from datetime import datetime
from typing import List, Optional

from photoshare.schemas.common import CamelModel


class UserProfile(CamelModel):
    id: uuid.UUID
    display_name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    photo_count: int
    follower_count: int
    following_count: int
    is_following: bool
    is_own_profile: bool


class ProfileUpdate(CamelModel):
    """
    PATCH /api/users/me body.

    displayName and theme are applied only when non-empty; bio is applied
    whenever the key is present, so an explicit null clears it.
    """

    display_name: Optional[str] = None
    bio: Optional[str] = None
    theme: Optional[str] = None


class FollowResult(CamelModel):
    following: bool
    follower_count: int


class FollowUser(CamelModel):
    id: uuid.UUID
    display_name: str
    avatar_url: Optional[str] = None
    followed_at: datetime


class FollowList(CamelModel):
    users: List[FollowUser]
    total: int
