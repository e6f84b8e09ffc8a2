"""
PhotoShare Backend — Image Processing Worker Task
===================================================

What:  Consumes "image uploaded" messages and stores vision tags for the photo.
How:   For each message:
           1. Load the photo row (skip if it was deleted meanwhile)
           2. Read the blob bytes from the storage backend
           3. Ask the vision service for tags
           4. Insert new tags as photo_tags rows with source = "vision"

The task body is async (SQLAlchemy async session, aiofiles/boto3 storage,
async Gemini client) and is driven by asyncio.run() inside the Celery worker
process. Each run gets its own NullPool engine, because pooled asyncpg
connections cannot be shared between event loops.

Failures are logged and the message is acknowledged; tagging is a best-effort
enrichment and is not retried.
"""

import asyncio
import logging
import mimetypes
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from photoshare.config import settings
from photoshare.database import build_engine
from photoshare.exceptions import PhotoShareError
from photoshare.models import Photo, PhotoTag
from photoshare.services.storage_service import storage_service
from photoshare.services.vision_service import ImageTagger, vision_service
from photoshare.tasks.celery_app import PROCESS_IMAGE_TASK, celery_app

logger = logging.getLogger(__name__)


async def apply_vision_tags(
    session: AsyncSession,
    photo_id: uuid.UUID,
    tagger: Optional[ImageTagger] = None,
) -> List[str]:
    """
    Tags one photo inside the given session; returns the tags that were added.

    Tags the photo already carries (from the uploader or an earlier run) are
    not inserted again.
    """
    tagger = tagger or vision_service
    if not tagger.enabled:
        logger.info("Vision tagging disabled; photo %s left as is", photo_id)
        return []

    photo = await session.get(Photo, photo_id)
    if photo is None:
        logger.warning("Photo %s no longer exists; skipping tagging", photo_id)
        return []

    image = await storage_service.read(photo.file_path)
    mime_type = mimetypes.guess_type(photo.file_path)[0] or "image/jpeg"
    suggested = await tagger.tag_image(image, mime_type)

    existing = {
        name.lower()
        for name in (
            await session.scalars(select(PhotoTag.name).where(PhotoTag.photo_id == photo_id))
        ).all()
    }
    added = [tag for tag in suggested if tag not in existing]
    session.add_all(
        PhotoTag(photo_id=photo_id, name=tag, source="vision") for tag in added
    )
    await session.flush()
    logger.info("Added %d vision tags to photo %s", len(added), photo_id)
    return added


async def _process(photo_id: uuid.UUID) -> List[str]:
    engine = build_engine(settings.database_url, poolclass=NullPool)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with session_factory() as session:
            async with session.begin():
                return await apply_vision_tags(session, photo_id)
    finally:
        await engine.dispose()


@celery_app.task(name=PROCESS_IMAGE_TASK, queue=settings.image_processing_queue)
def process_uploaded_image(
    photoId: str,
    imageUrl: str = "",
    uploadedAt: str = "",
    **extra: Any,
) -> Dict[str, Any]:
    logger.info("Processing uploaded image for photo %s (%s)", photoId, imageUrl)
    try:
        photo_id = uuid.UUID(photoId)
    except ValueError:
        logger.error("Discarding message with invalid photoId %r", photoId)
        return {"photoId": photoId, "tags": [], "status": "invalid"}

    try:
        tags = asyncio.run(_process(photo_id))
    except PhotoShareError as e:
        logger.error("Tagging failed for photo %s: %s | %s", photoId, e.message, e.context)
        return {"photoId": photoId, "tags": [], "status": "failed"}

    return {"photoId": photoId, "tags": tags, "status": "done"}
