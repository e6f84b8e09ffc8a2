"""
PhotoShare Backend — Vision Tagging Service (Google Gemini)
=============================================================

What:  Suggests descriptive tags for an uploaded photo ("beach", "sunset", "dog").
Why:   Auto-tags make photos discoverable through GET /api/photos/search?tag=...
       without the uploader typing every label by hand.
How:   Sends the image bytes plus a short labelling prompt to Gemini and turns the
       free-text answer into a clean tag list.
Who:   Called only by the image-processing worker (tasks/image_processing.py),
       never on the request path. A slow or failing model therefore never
       delays an upload.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient failures
    2. Circuit breaker so a Gemini outage turns into instant, cheap failures
    3. Disabled entirely (returns no tags) when GEMINI_API_KEY is unset

Tag normalisation:
    lowercase, trimmed, bullets and numbering stripped, de-duplicated in order,
    at most VISION_MAX_TAGS (10) entries.
"""

import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

import google.generativeai as genai
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from photoshare.config import settings
from photoshare.exceptions import CircuitBreakerOpenError, VisionServiceError

logger = logging.getLogger(__name__)

# Leading list markers a model tends to add: "-", "*", "•", "1." or "2)"
_LIST_MARKER = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s*")


def normalize_tags(raw_labels: List[str], limit: Optional[int] = None) -> List[str]:
    """Lowercase, strip and de-duplicate labels, keeping first-seen order."""
    max_tags = limit or settings.vision_max_tags
    tags: List[str] = []
    for label in raw_labels:
        tag = _LIST_MARKER.sub("", label).strip().strip(".").lower()
        if tag and tag not in tags:
            tags.append(tag)
        if len(tags) >= max_tags:
            break
    return tags


class CircuitBreaker:
    """
    Circuit breaker guarding calls to the vision provider.

    State Machine:
        CLOSED → failure_count reaches threshold → OPEN
        OPEN → recovery_timeout elapsed → HALF_OPEN (one trial call)
        HALF_OPEN → success → CLOSED; failure → OPEN

    State is per process. Celery workers each keep their own breaker, which
    is acceptable: the goal is to stop one worker from hammering a dead API.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True when a call may proceed.

        Raises:
            CircuitBreakerOpenError while OPEN and the recovery window is running.
        """
        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed < self.recovery_timeout:
                raise CircuitBreakerOpenError(
                    recovery_time=int(self.recovery_timeout - elapsed)
                )
            logger.info("Vision circuit breaker HALF_OPEN after %.1fs", elapsed)
            self.state = self.HALF_OPEN
        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Vision circuit breaker CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Vision circuit breaker back to OPEN (trial call failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Vision circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


class ImageTagger(ABC):
    """Interface for providers that label images."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @abstractmethod
    async def tag_image(self, image: bytes, mime_type: str) -> List[str]:
        """
        Returns normalised tags for the image, or [] when disabled.

        Raises:
            CircuitBreakerOpenError: provider recently failed repeatedly
            VisionServiceError: provider failed after all retries
        """


class GeminiVisionService(ImageTagger):
    """Gemini implementation of ImageTagger with retries and a circuit breaker."""

    TAG_PROMPT = (
        "You label photos for a photo-sharing site. List up to {max_tags} short, "
        "concrete tags describing the main subjects, setting and mood of this image. "
        "Use one or two lowercase words per tag. Reply with the tags only, "
        "separated by commas, with no other text."
    )

    def __init__(self):
        self._enabled = settings.vision_enabled
        if self._enabled:
            genai.configure(api_key=settings.gemini_api_key)
        self.model = genai.GenerativeModel(settings.gemini_model)
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )
        logger.info(
            "GeminiVisionService initialized (enabled=%s, model=%s)",
            self._enabled,
            settings.gemini_model,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def status(self) -> str:
        """available | circuit_open | disabled, as reported by /api/health."""
        if not self._enabled:
            return "disabled"
        if self.circuit_breaker.state == CircuitBreaker.OPEN:
            return "circuit_open"
        return "available"

    async def tag_image(self, image: bytes, mime_type: str) -> List[str]:
        if not self._enabled:
            logger.debug("Vision tagging disabled; skipping")
            return []

        call_id = uuid.uuid4().hex[:8]
        self.circuit_breaker.can_execute()

        try:
            text = await self._call_gemini_with_retry(image, mime_type, call_id)
            self.circuit_breaker.record_success()
        except RetryError as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] All Gemini retries exhausted: %s",
                call_id,
                str(e.last_attempt.exception()) if e.last_attempt else "Unknown error",
            )
            raise VisionServiceError(
                retry_after=self.circuit_breaker.recovery_timeout,
                context={"call_id": call_id, "attempts": settings.retry_max_attempts},
            )
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error("[%s] Gemini tagging failed: %s", call_id, str(e))
            raise VisionServiceError(
                context={"call_id": call_id, "error_type": type(e).__name__},
            )

        tags = normalize_tags(re.split(r"[,\n]", text))
        logger.info("[%s] Gemini suggested %d tags", call_id, len(tags))
        return tags

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, image: bytes, mime_type: str, call_id: str) -> str:
        start_time = time.time()
        try:
            response = await self.model.generate_content_async(
                [
                    self.TAG_PROMPT.format(max_tags=settings.vision_max_tags),
                    {"mime_type": mime_type, "data": image},
                ],
                request_options={"timeout": 60},
            )
        except Exception as e:
            logger.warning(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id,
                (time.time() - start_time) * 1000,
                str(e),
            )
            raise

        logger.info("[%s] Gemini responded in %.0fms", call_id, (time.time() - start_time) * 1000)
        return response.text or ""


# ── Singleton Instance ────────────────────────────────────────────────────
# Shared so the circuit breaker state survives across tasks in one worker
vision_service = GeminiVisionService()
