"""
PhotoShare Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database.
How:   Plain async functions taking an AsyncSession; integrations are module
       singletons (storage_service, cache_service, vision_service).

Service Inventory:
    Domain
        - auth_service, user_service, follow_service
        - photo_service (aggregate photo query, uploads, deletes)
        - comment_service, rating_service, like_service
        - notification_service, collection_service, admin_service
    Integrations
        - storage_service: blob validation and storage (local disk or S3)
        - cache_service:   Redis read-through cache for photo reads
        - queue_service:   Celery producer for image-processing messages
        - vision_service:  Gemini image tagging with retries + circuit breaker

Why services are separate from routes:
    1. Testability: services can be exercised without HTTP
    2. Reusability: the worker and the admin routes reuse photo_service
"""
