"""
PhotoShare Backend — Application Package Initializer
=====================================================

What: Marks the `photoshare` directory as a Python package.
Why:  Enables module imports like `from photoshare.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest,
      uvicorn and the Celery worker.

Architecture Note:
    The backend follows the same layered architecture for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← queries, ownership checks, shaping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + camelCase Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Side integrations (blob store, cache, queue, vision tagging) live in
    `services/` and are each optional except the blob store.
"""

__version__ = "1.0.0"
