"""
PhotoShare Backend — Image Processing Queue Producer
======================================================

What:  Publishes an "image uploaded" message after a photo is stored.
Why:   Vision tagging is slow and optional; a Celery worker does it off the
       request path (see tasks/image_processing.py).
How:   celery_app.send_task() by task name, so the web process never imports
       worker code. kombu's publish is blocking, so it runs in the threadpool.

Message body (task kwargs):
    {"photoId": "<uuid>", "imageUrl": "<resolved url>", "uploadedAt": "<ISO 8601>"}

Failure policy:
    Returns False when BROKER_URL is unset or publishing fails. Errors are
    logged and swallowed; an upload never fails because the queue is down.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from starlette.concurrency import run_in_threadpool

from photoshare.config import settings
from photoshare.tasks.celery_app import PROCESS_IMAGE_TASK, celery_app

logger = logging.getLogger(__name__)


def build_image_message(photo_id: Any, image_url: str) -> Dict[str, str]:
    return {
        "photoId": str(photo_id),
        "imageUrl": image_url,
        "uploadedAt": datetime.now(timezone.utc).isoformat(),
    }


async def send_image_processing_message(photo_id: Any, image_url: str) -> bool:
    if not settings.queue_enabled:
        logger.debug("Queue disabled; not dispatching image processing for %s", photo_id)
        return False

    message = build_image_message(photo_id, image_url)
    try:
        await run_in_threadpool(
            celery_app.send_task,
            PROCESS_IMAGE_TASK,
            kwargs=message,
            queue=settings.image_processing_queue,
        )
    except Exception as e:
        # kombu surfaces broker outages as several unrelated exception types
        logger.error("Failed to enqueue image processing for %s: %s", photo_id, str(e))
        return False

    logger.info("Queued image processing for photo %s", photo_id)
    return True
