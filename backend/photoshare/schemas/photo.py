"""
Schemas for photos and the engagement endpoints nested under a photo
(comments, ratings, likes).

Photo shapes:
    PhotoSummary   list/search/trending/user pages; includes commentCount
    PhotoDetail    GET /api/photos/{id}; no commentCount, adds tags and the
                   caller's own rating and like state
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from photoshare.schemas.common import CamelModel, PagePagination, UserRef


class PhotoBase(CamelModel):
    id: uuid.UUID
    title: str
    caption: Optional[str] = None
    location: Optional[str] = None
    file_path: str = Field(description="Resolved image URL")
    created_at: datetime
    creator: UserRef
    avg_rating: float = 0
    rating_count: int = 0
    like_count: int = 0


class PhotoSummary(PhotoBase):
    comment_count: int = 0


class PhotoDetail(PhotoBase):
    tags: List[str] = Field(default_factory=list)
    user_rating: Optional[int] = None
    user_liked: bool = False


class PhotoPage(CamelModel):
    photos: List[PhotoSummary]
    pagination: PagePagination


class PhotoUploadResponse(CamelModel):
    id: uuid.UUID
    url: str
    message: str = "Photo uploaded successfully"


# ── Comments ──────────────────────────────────────────────────────────────

class CommentAuthor(UserRef):
    role: str


class CommentCreate(CamelModel):
    content: Optional[str] = None


class CommentResponse(CamelModel):
    id: uuid.UUID
    content: str
    created_at: datetime
    user: CommentAuthor


# ── Ratings ───────────────────────────────────────────────────────────────

class RatingCreate(CamelModel):
    # Any: the service rejects bools, floats and strings with one message
    rating: Any = None


class RatingStats(CamelModel):
    average: float
    count: int
    distribution: Dict[str, int]


class PhotoRatingStats(CamelModel):
    average: float
    count: int


class RatingResponse(CamelModel):
    id: uuid.UUID
    rating: int
    created_at: datetime
    photo_stats: PhotoRatingStats


class MyRatingResponse(CamelModel):
    rating: Optional[int] = None


# ── Likes ─────────────────────────────────────────────────────────────────

class LikeStatus(CamelModel):
    liked: bool
    like_count: int
