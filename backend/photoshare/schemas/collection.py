"""Schemas for /api/collections."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from photoshare.schemas.common import CamelModel, UserRef


class CollectionCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = True


class CollectionCreated(CamelModel):
    id: uuid.UUID
    message: str = "Collection created"


class CollectionSummary(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    is_public: bool
    created_at: datetime
    photo_count: int
    cover_photo: Optional[str] = Field(
        default=None, description="URL of the most recently added photo"
    )


class CollectionList(CamelModel):
    collections: List[CollectionSummary]


class CollectionPhotoItem(CamelModel):
    id: uuid.UUID
    title: str
    file_path: str
    created_at: datetime
    creator: UserRef
    avg_rating: float = 0
    like_count: int = 0


class CollectionDetail(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    is_public: bool
    created_at: datetime
    owner: UserRef
    is_owner: bool
    photos: List[CollectionPhotoItem]


class CollectionPhotoAdd(CamelModel):
    photo_id: Optional[uuid.UUID] = None
