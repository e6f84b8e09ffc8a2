"""
PhotoShare Backend — Vision Tagging Unit Tests (Mocked)
=========================================================

What:  Tests for tag normalisation, the circuit breaker, GeminiVisionService
       with a mocked model, and the image-processing worker task.
Why:   Tests should not make real Gemini calls (costs money, needs network).

What we test:
    ✅ Tag normalisation (bullets, case, duplicates, limit)
    ✅ Circuit breaker state machine
    ✅ Disabled service returns no tags
    ✅ Successful tagging; provider failure → VisionServiceError; open circuit
    ✅ Worker stores vision tags once and skips missing photos
"""

import time
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select

from photoshare.exceptions import CircuitBreakerOpenError, VisionServiceError
from photoshare.models import Photo, PhotoTag, User
from photoshare.services.vision_service import (
    CircuitBreaker,
    GeminiVisionService,
    ImageTagger,
    normalize_tags,
)
from photoshare.tasks.image_processing import apply_vision_tags, process_uploaded_image


def _enabled_service(model):
    service = GeminiVisionService()
    service._enabled = True
    service.model = model
    return service


class TestNormalizeTags:

    def test_strips_markers_and_dedupes(self):
        raw = ["- Beach", "* sunset.", "1. Beach", "2) Ocean Waves", "", "  "]
        assert normalize_tags(raw) == ["beach", "sunset", "ocean waves"]

    def test_respects_limit(self):
        assert normalize_tags([f"tag{i}" for i in range(20)], limit=3) == ["tag0", "tag1", "tag2"]


class TestCircuitBreaker:

    def test_initial_state_is_closed(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        assert cb.state == "closed"
        assert cb.failure_count == 0

    def test_opens_at_threshold_and_rejects(self):
        cb = CircuitBreaker(failure_threshold=2, recovery_timeout=60)
        cb.record_failure()
        assert cb.state == "closed"
        cb.record_failure()
        assert cb.state == "open"
        with pytest.raises(CircuitBreakerOpenError):
            cb.can_execute()

    def test_half_open_after_timeout_then_closes(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        cb.record_failure()
        time.sleep(0.01)
        assert cb.can_execute() is True
        assert cb.state == "half_open"
        cb.record_success()
        assert cb.state == "closed"
        assert cb.failure_count == 0

    def test_half_open_failure_reopens(self):
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=0)
        cb.state = CircuitBreaker.HALF_OPEN
        cb.record_failure()
        assert cb.state == "open"


class TestGeminiVisionService:

    @pytest.mark.asyncio
    async def test_disabled_returns_no_tags(self):
        service = GeminiVisionService()
        assert service.enabled is False
        assert service.status == "disabled"
        assert await service.tag_image(b"img", "image/jpeg") == []

    @pytest.mark.asyncio
    async def test_tag_image_success(self):
        model = MagicMock()
        model.generate_content_async = AsyncMock(
            return_value=MagicMock(text="Beach, Sunset, beach\nPalm Trees")
        )
        service = _enabled_service(model)

        assert await service.tag_image(b"img", "image/jpeg") == ["beach", "sunset", "palm trees"]
        parts = model.generate_content_async.call_args.args[0]
        assert parts[1] == {"mime_type": "image/jpeg", "data": b"img"}
        assert service.status == "available"

    @pytest.mark.asyncio
    async def test_provider_failure_raises_and_counts(self):
        model = MagicMock()
        model.generate_content_async = AsyncMock(side_effect=RuntimeError("quota"))
        service = _enabled_service(model)

        with pytest.raises(VisionServiceError):
            await service.tag_image(b"img", "image/jpeg")
        assert service.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_short_circuits(self):
        model = MagicMock()
        model.generate_content_async = AsyncMock()
        service = _enabled_service(model)
        service.circuit_breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
        service.circuit_breaker.record_failure()

        with pytest.raises(CircuitBreakerOpenError):
            await service.tag_image(b"img", "image/jpeg")
        model.generate_content_async.assert_not_called()
        assert service.status == "circuit_open"


class _FakeTagger(ImageTagger):
    def __init__(self, tags):
        self.tags = tags
        self.calls = 0

    @property
    def enabled(self) -> bool:
        return True

    async def tag_image(self, image, mime_type):
        self.calls += 1
        return list(self.tags)


class TestImageProcessingTask:

    async def _photo_with_blob(self, session, sample_image_bytes):
        from photoshare.services.storage_service import storage_service

        user = User(email="tagger@example.com", password_hash="x", display_name="Tagger")
        session.add(user)
        await session.flush()
        blob = await storage_service.upload("tagged.jpg", sample_image_bytes)
        photo = Photo(creator_id=user.id, title="Tagged", file_path=blob.name)
        session.add(photo)
        await session.flush()
        session.add(PhotoTag(photo_id=photo.id, name="beach", source="manual"))
        await session.flush()
        return photo

    @pytest.mark.asyncio
    async def test_apply_vision_tags(self, db_session, sample_image_bytes):
        photo = await self._photo_with_blob(db_session, sample_image_bytes)
        tagger = _FakeTagger(["beach", "sunset", "sea"])

        added = await apply_vision_tags(db_session, photo.id, tagger=tagger)
        assert added == ["sunset", "sea"]

        rows = (
            await db_session.execute(
                select(PhotoTag.name, PhotoTag.source).where(PhotoTag.photo_id == photo.id)
            )
        ).all()
        assert sorted(tuple(row) for row in rows) == [
            ("beach", "manual"),
            ("sea", "vision"),
            ("sunset", "vision"),
        ]

        # A second run adds nothing new
        assert await apply_vision_tags(db_session, photo.id, tagger=tagger) == []

    @pytest.mark.asyncio
    async def test_missing_photo_is_skipped(self, db_session):
        tagger = _FakeTagger(["x"])
        assert await apply_vision_tags(db_session, uuid.uuid4(), tagger=tagger) == []
        assert tagger.calls == 0

    def test_task_rejects_invalid_photo_id(self):
        result = process_uploaded_image.run(photoId="not-a-uuid")
        assert result["status"] == "invalid"

    def test_task_reports_failures(self):
        with patch(
            "photoshare.tasks.image_processing._process",
            new=AsyncMock(side_effect=VisionServiceError()),
        ):
            result = process_uploaded_image.run(photoId=str(uuid.uuid4()))
        assert result == {"photoId": result["photoId"], "tags": [], "status": "failed"}
