"""
PhotoShare Backend — Photo Endpoint Tests
===========================================

What we test:
    ✅ Upload stores the blob, the row and manual tags
    ✅ Upload validation: missing image/title, bad type, bad tags, no token
    ✅ Listing, pagination block and aggregate counts
    ✅ Search by text, location and tag; trending order
    ✅ Detail with per-user fields; image redirect
    ✅ Delete: owner only, cascades, removes the blob
    ✅ Photo cache: list pages served from cache, anonymous-only detail caching,
       engagement writes leave counts stale, create/delete clear photos:*
"""

from fnmatch import fnmatch
from pathlib import Path

import pytest

from conftest import register_user, upload_photo
from photoshare.config import settings
from photoshare.services import photo_service
from photoshare.services.cache_service import PHOTO_KEY_PATTERN


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_success(self, client, creator, sample_image_bytes):
        response = await client.post(
            "/api/photos",
            headers=creator.headers,
            data={
                "title": "Beach day",
                "caption": "Waves",
                "location": "Lisbon",
                "tags": '["beach", "summer", "beach", " "]',
            },
            files={"image": ("beach.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Photo uploaded successfully"
        assert body["url"].startswith("http://test/uploads/originals/")
        assert body["url"].endswith(".jpg")

        blob_name = body["url"].rsplit("/", 1)[-1]
        assert (Path(settings.storage_root) / "originals" / blob_name).exists()

        detail = (await client.get(f"/api/photos/{body['id']}")).json()
        assert detail["title"] == "Beach day"
        assert detail["location"] == "Lisbon"
        assert sorted(detail["tags"]) == ["beach", "summer"]
        assert detail["creator"]["id"] == str(creator.id)

    @pytest.mark.asyncio
    async def test_upload_requires_auth(self, client, sample_image_bytes):
        response = await client.post(
            "/api/photos",
            data={"title": "x"},
            files={"image": ("a.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_upload_requires_image(self, client, creator):
        response = await client.post(
            "/api/photos", headers=creator.headers, data={"title": "No image"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Image file is required"

    @pytest.mark.asyncio
    async def test_upload_requires_title(self, client, creator, sample_image_bytes):
        response = await client.post(
            "/api/photos",
            headers=creator.headers,
            data={"title": "   "},
            files={"image": ("a.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Title is required"

    @pytest.mark.asyncio
    async def test_upload_rejects_unsupported_extension(self, client, creator):
        response = await client.post(
            "/api/photos",
            headers=creator.headers,
            data={"title": "Doc"},
            files={"image": ("notes.pdf", b"%PDF-1.4 fake", "application/pdf")},
        )
        assert response.status_code == 400
        assert "Invalid file type" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_upload_rejects_bad_tags(self, client, creator, sample_image_bytes):
        response = await client.post(
            "/api/photos",
            headers=creator.headers,
            data={"title": "Tags", "tags": "not json"},
            files={"image": ("a.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Tags must be a JSON array of strings"


class TestListAndSearch:

    @pytest.mark.asyncio
    async def test_list_newest_first_with_pagination(self, client, creator, sample_image_bytes):
        for title in ("first", "second", "third"):
            await upload_photo(client, creator, sample_image_bytes, title=title)

        response = await client.get("/api/photos", params={"page": 1, "limit": 2})
        assert response.status_code == 200
        body = response.json()
        assert [p["title"] for p in body["photos"]] == ["third", "second"]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

        page2 = (await client.get("/api/photos", params={"page": 2, "limit": 2})).json()
        assert [p["title"] for p in page2["photos"]] == ["first"]

    @pytest.mark.asyncio
    async def test_list_aggregates_counts(self, client, creator, consumer, photo_id):
        await client.post(
            f"/api/photos/{photo_id}/ratings", headers=consumer.headers, json={"rating": 4}
        )
        await client.post(
            f"/api/photos/{photo_id}/ratings", headers=creator.headers, json={"rating": 2}
        )
        await client.post(
            f"/api/photos/{photo_id}/comments", headers=consumer.headers, json={"content": "Nice"}
        )
        await client.post(f"/api/likes/{photo_id}", headers=consumer.headers)

        photo = (await client.get("/api/photos")).json()["photos"][0]
        assert photo["avgRating"] == pytest.approx(3.0)
        assert photo["ratingCount"] == 2
        assert photo["commentCount"] == 1
        assert photo["likeCount"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [{"limit": 0}, {"page": 0}, {"page": "abc"}, {"limit": 101}],
    )
    async def test_invalid_paging_is_400(self, client, params):
        response = await client.get("/api/photos", params=params)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert body["details"][0]["field"] in ("query.page", "query.limit")

    @pytest.mark.asyncio
    async def test_search_filters(self, client, creator, sample_image_bytes):
        await upload_photo(
            client, creator, sample_image_bytes, title="Mountain Lake",
            location="Alps", tags='["nature"]',
        )
        await upload_photo(
            client, creator, sample_image_bytes, title="City Night",
            caption="neon lights", location="Tokyo", tags='["urban"]',
        )

        by_text = (await client.get("/api/photos/search", params={"q": "NEON"})).json()
        assert [p["title"] for p in by_text["photos"]] == ["City Night"]

        by_location = (await client.get("/api/photos/search", params={"location": "alp"})).json()
        assert [p["title"] for p in by_location["photos"]] == ["Mountain Lake"]

        by_tag = (await client.get("/api/photos/search", params={"tag": "natu"})).json()
        assert [p["title"] for p in by_tag["photos"]] == ["Mountain Lake"]
        assert by_tag["pagination"]["total"] == 1

        combined = (
            await client.get("/api/photos/search", params={"q": "city", "location": "alps"})
        ).json()
        assert combined["photos"] == []

    @pytest.mark.asyncio
    async def test_trending_orders_by_engagement(self, client, creator, consumer, sample_image_bytes):
        popular = await upload_photo(client, creator, sample_image_bytes, title="popular")
        await upload_photo(client, creator, sample_image_bytes, title="quiet")
        await client.post(f"/api/likes/{popular}", headers=consumer.headers)

        body = (await client.get("/api/photos/trending")).json()
        assert [p["title"] for p in body["photos"]] == ["popular", "quiet"]


class TestDetail:

    @pytest.mark.asyncio
    async def test_detail_not_found(self, client):
        response = await client.get("/api/photos/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404
        assert response.json()["error"] == "Photo not found"

    @pytest.mark.asyncio
    async def test_detail_bad_uuid_is_400(self, client):
        response = await client.get("/api/photos/not-a-uuid")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_detail_user_fields(self, client, consumer, photo_id):
        anonymous = (await client.get(f"/api/photos/{photo_id}")).json()
        assert anonymous["userRating"] is None
        assert anonymous["userLiked"] is False
        assert "commentCount" not in anonymous

        await client.post(
            f"/api/photos/{photo_id}/ratings", headers=consumer.headers, json={"rating": 5}
        )
        await client.post(f"/api/likes/{photo_id}", headers=consumer.headers)

        mine = (await client.get(f"/api/photos/{photo_id}", headers=consumer.headers)).json()
        assert mine["userRating"] == 5
        assert mine["userLiked"] is True

    @pytest.mark.asyncio
    async def test_image_redirect(self, client, photo_id):
        response = await client.get(f"/api/photos/{photo_id}/image")
        assert response.status_code == 302
        assert response.headers["location"].startswith("http://test/uploads/originals/")


class TestDelete:

    @pytest.mark.asyncio
    async def test_only_owner_can_delete(self, client, consumer, photo_id):
        response = await client.delete(f"/api/photos/{photo_id}", headers=consumer.headers)
        assert response.status_code == 403
        assert response.json()["error"] == "You can only delete your own photos"

    @pytest.mark.asyncio
    async def test_delete_cascades_and_removes_blob(self, client, creator, consumer, photo_id):
        await client.post(
            f"/api/photos/{photo_id}/comments", headers=consumer.headers, json={"content": "hi"}
        )
        detail = (await client.get(f"/api/photos/{photo_id}")).json()
        blob_path = Path(settings.storage_root) / "originals" / detail["filePath"].rsplit("/", 1)[-1]
        assert blob_path.exists()

        response = await client.delete(f"/api/photos/{photo_id}", headers=creator.headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Photo deleted successfully"

        assert (await client.get(f"/api/photos/{photo_id}")).status_code == 404
        assert (await client.get(f"/api/photos/{photo_id}/comments")).status_code == 404
        assert not blob_path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_photo(self, client, creator):
        response = await client.delete(
            "/api/photos/00000000-0000-0000-0000-000000000000", headers=creator.headers
        )
        assert response.status_code == 404


class TestUnknownRoutes:

    @pytest.mark.asyncio
    async def test_unknown_route_has_error_body(self, client):
        response = await client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert "error" in response.json()
        assert response.headers.get("X-Request-ID")


class InMemoryCache:
    """Stands in for the Redis-backed cache_service inside photo_service."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl_seconds=None):
        self.store[key] = value

    async def clear_photo_cache(self):
        removed = [key for key in self.store if fnmatch(key, PHOTO_KEY_PATTERN)]
        for key in removed:
            del self.store[key]
        return len(removed)


@pytest.fixture
def photo_cache(monkeypatch):
    cache = InMemoryCache()
    monkeypatch.setattr(photo_service, "cache_service", cache)
    return cache


class TestPhotoCache:

    @pytest.mark.asyncio
    async def test_list_page_is_stored_and_served(self, client, photo_cache, photo_id):
        first = (await client.get("/api/photos")).json()
        assert first["photos"][0]["id"] == str(photo_id)
        assert "photos:list:page:1:limit:12" in photo_cache.store

        photo_cache.store["photos:list:page:1:limit:12"]["photos"][0]["title"] = "From cache"
        second = (await client.get("/api/photos")).json()
        assert second["photos"][0]["title"] == "From cache"

    @pytest.mark.asyncio
    async def test_engagement_writes_leave_cached_list_stale(
        self, client, photo_cache, consumer, photo_id
    ):
        await client.get("/api/photos")

        await client.post(
            f"/api/photos/{photo_id}/ratings", headers=consumer.headers, json={"rating": 5}
        )
        await client.post(f"/api/likes/{photo_id}", headers=consumer.headers)
        await client.post(
            f"/api/photos/{photo_id}/comments", headers=consumer.headers, json={"content": "hi"}
        )

        photo = (await client.get("/api/photos")).json()["photos"][0]
        assert photo["ratingCount"] == 0
        assert photo["likeCount"] == 0
        assert photo["commentCount"] == 0

    @pytest.mark.asyncio
    async def test_single_photo_cached_for_anonymous_only(
        self, client, photo_cache, consumer, photo_id
    ):
        single_key = f"photos:single:{photo_id}"

        await client.get(f"/api/photos/{photo_id}", headers=consumer.headers)
        assert single_key not in photo_cache.store

        await client.get(f"/api/photos/{photo_id}")
        assert single_key in photo_cache.store

        await client.post(f"/api/likes/{photo_id}", headers=consumer.headers)
        mine = (await client.get(f"/api/photos/{photo_id}", headers=consumer.headers)).json()
        assert mine["userLiked"] is True

    @pytest.mark.asyncio
    async def test_upload_clears_photo_keys(
        self, client, photo_cache, creator, photo_id, sample_image_bytes
    ):
        await client.get("/api/photos")
        await client.get(f"/api/photos/{photo_id}")
        photo_cache.store["unrelated"] = 1

        await upload_photo(client, creator, sample_image_bytes, title="Second")

        assert list(photo_cache.store) == ["unrelated"]
        titles = [p["title"] for p in (await client.get("/api/photos")).json()["photos"]]
        assert titles == ["Second", "Sunset"]

    @pytest.mark.asyncio
    async def test_owner_delete_clears_photo_keys(self, client, photo_cache, creator, photo_id):
        await client.get("/api/photos")
        await client.get(f"/api/photos/{photo_id}")

        response = await client.delete(f"/api/photos/{photo_id}", headers=creator.headers)
        assert response.status_code == 200
        assert photo_cache.store == {}
        assert (await client.get("/api/photos")).json()["photos"] == []

    @pytest.mark.asyncio
    async def test_admin_delete_clears_photo_keys(self, client, photo_cache, admin, photo_id):
        await client.get("/api/photos")

        response = await client.delete(f"/api/admin/photos/{photo_id}", headers=admin.headers)
        assert response.status_code == 200
        assert photo_cache.store == {}
