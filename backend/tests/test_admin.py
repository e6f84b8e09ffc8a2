"""
PhotoShare Backend — Admin Endpoint Tests
===========================================

What we test:
    ✅ Non-admins get 403 "Admin access required"
    ✅ Stats, user listing with photo counts
    ✅ User updates (role validation, no-op body) and deletion rules
    ✅ Report listing by status and status changes
    ✅ Photo removal, including already-missing photos
"""

import uuid

import pytest
from sqlalchemy import func, select

from photoshare.database import async_session_factory
from photoshare.models import Photo, Report


async def _add_report(reporter_id, photo_id=None, user_id=None, status="pending"):
    async with async_session_factory() as session:
        report = Report(
            reporter_id=reporter_id,
            photo_id=photo_id,
            user_id=user_id,
            type="photo" if photo_id else "user",
            reason="spam",
            status=status,
        )
        session.add(report)
        await session.commit()
        return report.id


class TestAdminAccess:

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self, client, consumer):
        response = await client.get("/api/admin/stats", headers=consumer.headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Admin access required"

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        assert (await client.get("/api/admin/stats")).status_code == 401


class TestAdminStatsAndUsers:

    @pytest.mark.asyncio
    async def test_stats(self, client, admin, consumer, creator, photo_id):
        await client.post(
            f"/api/photos/{photo_id}/comments", headers=consumer.headers, json={"content": "hey"}
        )
        await _add_report(consumer.id, photo_id=photo_id)

        body = (await client.get("/api/admin/stats", headers=admin.headers)).json()
        assert body["stats"] == {
            "totalUsers": 3,
            "totalPhotos": 1,
            "totalComments": 1,
            "pendingReports": 1,
        }
        assert len(body["recentUsers"]) == 3
        assert body["recentPhotos"][0]["creator"] == "Creator"

    @pytest.mark.asyncio
    async def test_list_users(self, client, admin, creator, photo_id):
        body = (await client.get("/api/admin/users", headers=admin.headers)).json()
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 2}
        rows = {row["email"]: row for row in body["users"]}
        assert rows["creator@example.com"]["photoCount"] == 1
        assert rows["admin@example.com"]["isAdmin"] is True

    @pytest.mark.asyncio
    async def test_update_user(self, client, admin, consumer):
        response = await client.patch(
            f"/api/admin/users/{consumer.id}",
            headers=admin.headers,
            json={"role": "creator", "isAdmin": True},
        )
        assert response.json() == {"success": True}

        me = (await client.get("/api/auth/me", headers=consumer.headers)).json()
        assert me["role"] == "creator"
        # is_admin is read from the database, so the old token now passes
        assert (await client.get("/api/admin/stats", headers=consumer.headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_update_user_validation(self, client, admin, consumer):
        empty = await client.patch(
            f"/api/admin/users/{consumer.id}", headers=admin.headers, json={}
        )
        assert empty.status_code == 400
        assert empty.json()["error"] == "No updates provided"

        bad_role = await client.patch(
            f"/api/admin/users/{consumer.id}", headers=admin.headers, json={"role": "wizard"}
        )
        assert bad_role.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_user(self, client, admin, creator, photo_id):
        own = await client.delete(f"/api/admin/users/{admin.id}", headers=admin.headers)
        assert own.status_code == 400
        assert own.json()["error"] == "Cannot delete yourself"

        response = await client.delete(f"/api/admin/users/{creator.id}", headers=admin.headers)
        assert response.json() == {"success": True}
        assert (await client.get(f"/api/users/{creator.id}")).status_code == 404
        assert (await client.get(f"/api/photos/{photo_id}")).status_code == 404


class TestReports:

    @pytest.mark.asyncio
    async def test_list_and_update_reports(self, client, admin, consumer, creator, photo_id):
        pending = await _add_report(consumer.id, photo_id=photo_id)
        await _add_report(consumer.id, user_id=creator.id, status="resolved")

        body = (await client.get("/api/admin/reports", headers=admin.headers)).json()
        assert body["pagination"]["total"] == 1
        report = body["reports"][0]
        assert report["id"] == str(pending)
        assert report["reporterName"] == "Consumer"
        assert report["photoTitle"] == "Sunset"
        assert report["photoPath"].startswith("http://test/uploads/originals/")

        resolved = (
            await client.get(
                "/api/admin/reports", headers=admin.headers, params={"status": "resolved"}
            )
        ).json()
        assert resolved["reports"][0]["reportedUserName"] == "Creator"

        updated = await client.patch(
            f"/api/admin/reports/{pending}", headers=admin.headers, json={"status": "dismissed"}
        )
        assert updated.json() == {"success": True}

        invalid = await client.patch(
            f"/api/admin/reports/{pending}", headers=admin.headers, json={"status": "archived"}
        )
        assert invalid.status_code == 400
        assert invalid.json()["error"] == "Invalid status"


class TestAdminPhotoDelete:

    @pytest.mark.asyncio
    async def test_admin_removes_photo(self, client, admin, photo_id):
        response = await client.delete(f"/api/admin/photos/{photo_id}", headers=admin.headers)
        assert response.json() == {"success": True}

        async with async_session_factory() as session:
            remaining = await session.scalar(select(func.count()).select_from(Photo))
        assert remaining == 0

    @pytest.mark.asyncio
    async def test_admin_remove_missing_photo(self, client, admin):
        response = await client.delete(f"/api/admin/photos/{uuid.uuid4()}", headers=admin.headers)
        assert response.status_code == 200
