"""
PhotoShare Backend — Background Tasks
=======================================

Celery application and the image-processing task. Start a worker with:

    celery -A photoshare.tasks.celery_app worker -Q image-processing
"""
