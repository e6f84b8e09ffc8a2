"""
Celery application shared by the API (producer) and the worker (consumer).

The broker is BROKER_URL; with it unset the app is still importable, the API
simply never publishes (see services/queue_service.py).
"""

from celery import Celery
from kombu import Exchange, Queue

from photoshare.config import settings

PROCESS_IMAGE_TASK = "photoshare.tasks.image_processing.process_uploaded_image"

celery_app = Celery(
    "photoshare",
    broker=settings.broker_url or "memory://",
    include=["photoshare.tasks.image_processing"],
)

celery_app.conf.update(
    task_queues=(
        Queue(
            settings.image_processing_queue,
            Exchange(settings.image_processing_queue),
            routing_key=settings.image_processing_queue,
        ),
    ),
    task_routes={
        PROCESS_IMAGE_TASK: {"queue": settings.image_processing_queue},
    },
    task_serializer="json",
    accept_content=["json"],
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=300,
    task_soft_time_limit=240,
    broker_connection_timeout=5,
    broker_connection_max_retries=3,
)
