# tests/test_routes/test_sync_routes.py
import pytest
import httpx

from app.dependencies import get_db, get_listing_service, get_review_service
from app.main import app
from app.services.listing_service import ListingService
from app.services.review_service import ReviewService
from tests.mocks import add_response, add_review


@pytest.fixture
async def client(db_session, settings, router):
    async def override_get_db():
        yield db_session

    async def override_review_service():
        return ReviewService(db_session, settings=settings, transport=router.transport)

    async def override_listing_service():
        return ListingService(db_session, settings=settings, transport=router.transport)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_review_service] = override_review_service
    app.dependency_overrides[get_listing_service] = override_listing_service

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestReviewRoutes:

    @pytest.mark.asyncio
    async def test_sync_location_reviews(self, client, router, tenant, location, facebook_credential):
        router.add("GET", "/v24.0/pg1/ratings", {"data": [{
            "rating": 5,
            "review_text": "Great",
            "created_time": "2024-03-01T10:15:00+0000",
            "open_graph_story": {"id": "story_1"},
            "reviewer": {"name": "Jane"},
        }]})

        response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/reviews/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["counts"]["facebook"] == 1
        assert data["total"] == 1
        assert data["reviews_synced_at"] is not None

    @pytest.mark.asyncio
    async def test_location_of_other_tenant_is_not_found(self, client, router, other_tenant, location):
        response = await client.post(f"/api/tenants/{other_tenant.id}/locations/{location.id}/reviews/sync")

        assert response.status_code == 404
        assert router.requests == []

    @pytest.mark.asyncio
    async def test_publish_response(self, client, db_session, router, tenant, location, facebook_credential):
        review = await add_review(db_session, location, "facebook", "story_9", meta={"open_graph_story": {"id": "story_9"}})
        reply = await add_response(db_session, review)
        router.add("POST", "/v24.0/story_9/comments", {"id": "c1"})

        response = await client.post(f"/api/tenants/{tenant.id}/responses/{reply.id}/publish")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "published"
        assert data["platform_synced"] is True

    @pytest.mark.asyncio
    async def test_publish_without_credential_is_conflict(self, client, db_session, router, tenant, location):
        review = await add_review(db_session, location, "facebook", "story_9", meta={"open_graph_story": {"id": "story_9"}})
        reply = await add_response(db_session, review)

        response = await client.post(f"/api/tenants/{tenant.id}/responses/{reply.id}/publish")

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "no_credential"

    @pytest.mark.asyncio
    async def test_publish_other_tenants_response_is_not_found(self, client, db_session, other_tenant, location):
        review = await add_review(db_session, location, "facebook", "story_9")
        reply = await add_response(db_session, review)

        response = await client.post(f"/api/tenants/{other_tenant.id}/responses/{reply.id}/publish")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_review_stats(self, client, db_session, tenant, location):
        await add_review(db_session, location, "facebook", "s1", rating=5)
        await add_review(db_session, location, "facebook", "s2", rating=4)

        response = await client.get(f"/api/tenants/{tenant.id}/reviews/stats", params={"location_id": location.id})

        assert response.status_code == 200
        data = response.json()
        assert data["total_reviews"] == 2
        assert data["average_rating"] == 4.5
        assert data["rating_distribution"]["5"] == 1


class TestListingRoutes:

    @pytest.mark.asyncio
    async def test_sync_single_platform(self, client, router, tenant, location, facebook_credential):
        router.add("GET", "/v24.0/pg1", {"id": "pg1", "name": "Acme Coffee Downtown", "phone": "555-0199"})

        response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/listings/facebook/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["listing"]["status"] == "synced"
        assert data["listing"]["has_discrepancies"] is True
        assert data["listing"]["discrepancies"]["phone"] == {"local": "555-0100", "platform": "555-0199"}

    @pytest.mark.asyncio
    async def test_unsupported_platform_is_bad_request(self, client, tenant, location):
        response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/listings/youtube/sync")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_platform_is_rejected(self, client, tenant, location):
        response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/listings/myspace/sync")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_sync_all_and_stats(self, client, router, tenant, location, facebook_credential):
        router.add("GET", "/v24.0/pg1", {"id": "pg1", "name": "Acme Coffee Downtown"})

        response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/listings/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["succeeded"] == 1
        assert data["total"] == 2
        assert data["results"]["google_my_business"] is None

        stats = (await client.get(f"/api/tenants/{tenant.id}/listings/stats")).json()
        assert stats["total_listings"] == 1
        assert stats["by_status"]["synced"] == 1
        assert stats["recently_synced"] == 1

    @pytest.mark.asyncio
    async def test_publish_all(self, client, router, tenant, location, facebook_credential):
        router.add("POST", "/v24.0/pg1", {"success": True})

        response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/listings/publish")

        assert response.status_code == 200
        assert response.json()["results"] == {"facebook": True, "google_my_business": None}


@pytest.mark.asyncio
async def test_single_publish_reports_not_attempted(client, router, tenant, location):
    response = await client.post(f"/api/tenants/{tenant.id}/locations/{location.id}/listings/facebook/publish")

    assert response.status_code == 200
    assert response.json() == {"platform": "facebook", "attempted": False, "success": False}
    assert router.requests == []
