"""
PhotoShare Backend — Storage Service Unit Tests
=================================================

What we test:
    ✅ Extension, size and MIME validation
    ✅ Local backend: save/read/delete, URL shape, traversal guard
    ✅ S3 backend against a mocked boto3 client
    ✅ URL resolution for blob names and external URLs
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from photoshare.config import settings
from photoshare.exceptions import StorageError, ValidationError
from photoshare.services.storage_service import (
    LocalStorageBackend,
    S3StorageBackend,
    StorageService,
)


@pytest.fixture
def local_service(temp_storage):
    return StorageService(LocalStorageBackend(root=temp_storage, public_base_url="http://cdn"))


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


class TestValidation:

    @pytest.mark.parametrize("filename", ["a.jpg", "a.jpeg", "a.PNG", "a.gif", "a.webp"])
    def test_allowed_extensions(self, local_service, filename):
        assert local_service.validate_extension(filename) == "." + filename.rsplit(".", 1)[1].lower()

    @pytest.mark.parametrize("filename", ["a.pdf", "a.exe", "noext", ""])
    def test_rejected_extensions(self, local_service, filename):
        with pytest.raises(ValidationError) as exc_info:
            local_service.validate_extension(filename)
        assert "Invalid file type" in exc_info.value.message

    def test_size_over_limit(self, local_service):
        with pytest.raises(ValidationError) as exc_info:
            local_service.validate_size(settings.max_file_size + 1)
        assert exc_info.value.message == "File too large. Maximum size is 10MB."

    def test_size_at_limit(self, local_service):
        local_service.validate_size(settings.max_file_size)

    def test_empty_file(self, local_service):
        with pytest.raises(ValidationError):
            local_service.validate_size(0)

    def test_mime_accepts_jpeg(self, local_service, sample_image_bytes):
        assert local_service.validate_mime_type(sample_image_bytes, "a.jpg") == "image/jpeg"


class TestLocalBackend:

    @pytest.mark.asyncio
    async def test_upload_read_delete(self, local_service, temp_storage, sample_image_bytes):
        blob = await local_service.upload("holiday.JPG", sample_image_bytes)
        assert blob.name.endswith(".jpg")
        assert blob.url == f"http://cdn/uploads/originals/{blob.name}"

        assert await local_service.read(blob.name) == sample_image_bytes
        assert await local_service.delete(blob.name) is True
        # A second delete finds nothing and still succeeds
        assert await local_service.delete(blob.name) is True

    @pytest.mark.asyncio
    async def test_traversal_is_refused(self, local_service):
        with pytest.raises(StorageError):
            await local_service.read("../secrets.txt")

    def test_resolve_url(self, local_service):
        assert local_service.resolve_url("x.png") == "http://cdn/uploads/originals/x.png"
        assert local_service.resolve_url("https://example.com/a.jpg") == "https://example.com/a.jpg"

    @pytest.mark.asyncio
    async def test_external_urls_are_not_deleted(self, local_service):
        assert await local_service.delete("https://example.com/a.jpg") is False


class TestS3Backend:

    @pytest.mark.asyncio
    async def test_save_and_delete_call_client(self, sample_image_bytes):
        client = MagicMock()
        service = StorageService(S3StorageBackend(bucket="photos", client=client))

        blob = await service.upload("a.jpg", sample_image_bytes)

        client.put_object.assert_called_once()
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "photos"
        assert kwargs["Key"] == f"originals/{blob.name}"
        assert kwargs["ContentType"] == "image/jpeg"
        assert blob.url.endswith(f"/originals/{blob.name}")

        assert await service.delete(blob.name) is True
        client.delete_object.assert_called_once_with(Bucket="photos", Key=f"originals/{blob.name}")

    @pytest.mark.asyncio
    async def test_upload_failure_becomes_storage_error(self, sample_image_bytes):
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "500", "Message": "boom"}}, "PutObject"
        )
        service = StorageService(S3StorageBackend(bucket="photos", client=client))

        with pytest.raises(StorageError):
            await service.upload("a.jpg", sample_image_bytes)

    @pytest.mark.asyncio
    async def test_delete_failure_is_swallowed(self):
        client = MagicMock()
        client.delete_object.side_effect = ClientError(
            {"Error": {"Code": "403", "Message": "denied"}}, "DeleteObject"
        )
        service = StorageService(S3StorageBackend(bucket="photos", client=client))
        assert await service.delete("a.jpg") is False
