"""
PhotoShare Backend — Blob Storage Service
===========================================

What:  Validates uploaded images and stores them in a blob store (local disk or S3).
Why:   The database keeps only a blob name; every response resolves that name
       to a URL through this module, so switching backends needs no data migration.
How:   StorageService validates (extension → size → magic bytes) and generates the
       blob name; a StorageBackend implementation moves the bytes.

Backends:
    LocalStorageBackend  aiofiles under STORAGE_ROOT/originals/, served by the
                         app itself at /uploads/originals/<name>
    S3StorageBackend     boto3 client, key originals/<name>; boto3 is blocking,
                         so calls run in Starlette's threadpool

Blob names:
    "<uuid4><ext>", e.g. "9b1d....jpg". No user input reaches the path, which
    rules out traversal and collisions. The extension is kept so the static
    file server and S3 both report the right Content-Type.

Upload validation order (cheapest first):
    1. Extension in {jpg, jpeg, png, gif, webp}
    2. Size ≤ MAX_FILE_SIZE (10MB default)
    3. Magic-byte MIME sniffing with python-magic
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from photoshare.config import settings
from photoshare.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

ORIGINALS_CONTAINER = "originals"

ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

INVALID_TYPE_MESSAGE = "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."


@dataclass(frozen=True)
class StoredBlob:
    name: str
    url: str


class StorageBackend(ABC):
    """Interface every blob store implements. Names are relative to the container."""

    @abstractmethod
    async def save(self, blob_name: str, content: bytes, content_type: str) -> None:
        ...

    @abstractmethod
    async def read(self, blob_name: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, blob_name: str) -> None:
        ...

    @abstractmethod
    def url_for(self, blob_name: str) -> str:
        ...


class LocalStorageBackend(StorageBackend):
    """
    Stores blobs on the local filesystem.

    Directory Structure:
        STORAGE_ROOT/
        └── originals/
            ├── 0b6f...e1.jpg
            └── 7d21...9c.png
    """

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root = Path(root or settings.storage_root).resolve()
        self.container_dir = self.root / ORIGINALS_CONTAINER
        self.container_dir.mkdir(parents=True, exist_ok=True)
        base = settings.public_base_url if public_base_url is None else public_base_url
        self.public_base_url = base.rstrip("/")
        logger.info("Local blob storage at %s", self.root)

    def _path(self, blob_name: str) -> Path:
        path = (self.container_dir / blob_name).resolve()
        # Blob names come from the database, but never follow one out of the container
        if path.parent != self.container_dir:
            raise StorageError(
                "Invalid blob name", context={"blob_name": blob_name}
            )
        return path

    async def save(self, blob_name: str, content: bytes, content_type: str) -> None:
        path = self._path(blob_name)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to write blob %s: %s", blob_name, str(e))
            raise StorageError(context={"blob_name": blob_name, "os_error": str(e)})

    async def read(self, blob_name: str) -> bytes:
        path = self._path(blob_name)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(
                "Failed to read image", context={"blob_name": blob_name, "os_error": str(e)}
            )

    async def delete(self, blob_name: str) -> None:
        path = self._path(blob_name)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Blob already gone: %s", blob_name)
        except OSError as e:
            raise StorageError(
                "Failed to delete image", context={"blob_name": blob_name, "os_error": str(e)}
            )

    def url_for(self, blob_name: str) -> str:
        return f"{self.public_base_url}/uploads/{ORIGINALS_CONTAINER}/{blob_name}"


class S3StorageBackend(StorageBackend):
    """
    Stores blobs in an S3-compatible bucket (AWS, MinIO, LocalStack).

    The client is created lazily so importing this module never needs
    credentials; tests pass a mock client directly.
    """

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.s3_bucket
        self._client = client

    @property
    def client(self):
        if self._client is None:
            session = boto3.session.Session(
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
                region_name=settings.s3_region,
            )
            self._client = session.client("s3", endpoint_url=settings.s3_endpoint_url)
        return self._client

    @staticmethod
    def _key(blob_name: str) -> str:
        return f"{ORIGINALS_CONTAINER}/{blob_name}"

    async def save(self, blob_name: str, content: bytes, content_type: str) -> None:
        try:
            await run_in_threadpool(
                self.client.put_object,
                Bucket=self.bucket,
                Key=self._key(blob_name),
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed for %s: %s", blob_name, str(e))
            raise StorageError(context={"blob_name": blob_name, "s3_error": str(e)})

    async def read(self, blob_name: str) -> bytes:
        try:
            response = await run_in_threadpool(
                self.client.get_object, Bucket=self.bucket, Key=self._key(blob_name)
            )
            return await run_in_threadpool(response["Body"].read)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(
                "Failed to read image", context={"blob_name": blob_name, "s3_error": str(e)}
            )

    async def delete(self, blob_name: str) -> None:
        try:
            await run_in_threadpool(
                self.client.delete_object, Bucket=self.bucket, Key=self._key(blob_name)
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(
                "Failed to delete image", context={"blob_name": blob_name, "s3_error": str(e)}
            )

    def url_for(self, blob_name: str) -> str:
        key = self._key(blob_name)
        if settings.s3_public_url:
            return f"{settings.s3_public_url.rstrip('/')}/{key}"
        return f"https://{self.bucket}.s3.{settings.s3_region}.amazonaws.com/{key}"


def build_backend() -> StorageBackend:
    if settings.storage_backend == "s3":
        return S3StorageBackend()
    return LocalStorageBackend()


class StorageService:
    """Upload validation plus name ↔ URL mapping on top of a StorageBackend."""

    def __init__(self, backend: Optional[StorageBackend] = None):
        self.backend = backend or build_backend()

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """Returns the lowercase extension, or raises ValidationError."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                INVALID_TYPE_MESSAGE,
                field="image",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, size: int) -> None:
        if size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                f"File too large. Maximum size is {max_mb:.0f}MB.",
                field="image",
                context={"size": size, "max_size": settings.max_file_size},
            )
        if size == 0:
            raise ValidationError("Uploaded file is empty", field="image")

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Sniffs the real content type from the file header bytes.

        A .jpg that is really a PDF is rejected here even though the
        extension check passed.
        """
        try:
            import magic
            mime_type = magic.from_buffer(content[:2048], mime=True)
        except ImportError:
            # python-magic needs the libmagic system library; trust the extension without it
            logger.warning(
                "python-magic not available, falling back to extension-based type detection"
            )
            ext = Path(filename).suffix.lower()
            mime_type = {
                ".jpg": "image/jpeg",
                ".jpeg": "image/jpeg",
                ".png": "image/png",
                ".gif": "image/gif",
                ".webp": "image/webp",
            }.get(ext, "application/octet-stream")

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                INVALID_TYPE_MESSAGE,
                field="image",
                context={"detected_mime": mime_type},
            )
        return mime_type

    # ── Operations ────────────────────────────────────────────────────────

    async def upload(self, filename: str, content: bytes) -> StoredBlob:
        ext = self.validate_extension(filename)
        self.validate_size(len(content))
        mime_type = self.validate_mime_type(content, filename)

        blob_name = f"{uuid.uuid4()}{ext}"
        await self.backend.save(blob_name, content, mime_type)
        logger.info("Stored blob %s (%d bytes, %s)", blob_name, len(content), mime_type)
        return StoredBlob(name=blob_name, url=self.backend.url_for(blob_name))

    def resolve_url(self, file_path: str) -> str:
        """Blob name → public URL; values that are already URLs pass through."""
        if file_path.startswith("http"):
            return file_path
        return self.backend.url_for(file_path)

    async def read(self, file_path: str) -> bytes:
        return await self.backend.read(file_path)

    async def delete(self, file_path: str) -> bool:
        """
        Best-effort delete. External URLs are never touched.

        Returns False when the blob could not be removed; the caller carries
        on with the database delete either way.
        """
        if file_path.startswith("http"):
            return False
        try:
            await self.backend.delete(file_path)
            return True
        except StorageError as e:
            logger.warning("Blob delete failed for %s: %s | %s", file_path, e.message, e.context)
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
storage_service = StorageService()
