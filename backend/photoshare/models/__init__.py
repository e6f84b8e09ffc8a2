"""
PhotoShare Backend — ORM Models
=================================

Importing this package registers every table on Base.metadata, which both
create_tables() and Alembic's autogenerate rely on.

Relationships are expressed as foreign keys only (no relationship() attributes):
every read is an explicit select/join in the service layer, and deletes rely on
ON DELETE CASCADE in the database.
"""

from photoshare.models.user import User
from photoshare.models.photo import Comment, Like, Photo, PhotoTag, Rating
from photoshare.models.social import Follow, Notification
from photoshare.models.collection import Collection, CollectionPhoto
from photoshare.models.report import Report

__all__ = [
    "User",
    "Photo",
    "PhotoTag",
    "Comment",
    "Rating",
    "Like",
    "Follow",
    "Notification",
    "Collection",
    "CollectionPhoto",
    "Report",
]
