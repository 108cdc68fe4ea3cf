# tests/unit/services/test_listing_service.py
import pytest

from app.core.enums import ListingStatus
from app.core.exceptions import UnsupportedPlatformError
from app.models import Listing, Location
from app.services.listing_service import ListingService
from tests.mocks import add_credential

PAGE_DETAILS = {
    "id": "pg1",
    "name": "Acme Coffee Downtown",
    "phone": "555-0199",
    "website": "https://acme.example",
    "about": "Coffee and pastries",
    "location": {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip": "62701", "country": "United States"},
    "category_list": [{"id": "1", "name": "Coffee Shop"}],
    "fan_count": 120,
    "overall_star_rating": 4.6,
    "link": "https://facebook.com/acme",
}


@pytest.fixture
def service(db_session, settings, router):
    return ListingService(db_session, settings=settings, transport=router.transport)


@pytest.fixture
async def gmb_location(db_session, tenant, future):
    location = Location(
        tenant_id=tenant.id,
        name="Acme Coffee Mall",
        address="9 Mall Rd",
        city="Springfield",
        phone="555-0300",
        google_place_id="place-1",
    )
    db_session.add(location)
    await db_session.commit()
    await add_credential(
        db_session, tenant, "google_my_business", access_token="gmb-token", expires_at=future, meta={"account_id": "123"}
    )
    return location


class TestSyncFromPlatform:

    @pytest.mark.asyncio
    async def test_facebook_sync_records_discrepancies(self, service, router, location, facebook_credential):
        router.add("GET", "/v24.0/pg1", PAGE_DETAILS)

        listing = await service.sync_from_platform(location, "facebook")

        assert listing.status == ListingStatus.SYNCED.value
        assert listing.external_id == "pg1"
        assert listing.categories == ["Coffee Shop"]
        assert listing.attributes["fan_count"] == 120
        assert listing.last_synced_at is not None
        assert listing.discrepancies == {"phone": {"local": "555-0100", "platform": "555-0199"}}

        call = router.calls_to("GET", "/v24.0/pg1")[0]
        assert call.url.params["access_token"] == "page-token-1"

    @pytest.mark.asyncio
    async def test_failed_fetch_creates_nothing(self, service, db_session, router, location, facebook_credential):
        router.add("GET", "/v24.0/pg1", {"error": {"message": "Internal"}}, status_code=500)

        assert await service.sync_from_platform(location, "facebook") is None
        assert await service.get_listing(location, "facebook") is None

    @pytest.mark.asyncio
    async def test_failed_fetch_marks_existing_listing(self, service, db_session, router, location, facebook_credential):
        db_session.add(Listing(location_id=location.id, platform="facebook", external_id="pg1", status="synced"))
        await db_session.commit()
        router.add("GET", "/v24.0/pg1", {"error": {"message": "Internal"}}, status_code=500)

        assert await service.sync_from_platform(location, "facebook") is None

        listing = await service.get_listing(location, "facebook")
        assert listing.status == ListingStatus.ERROR.value
        assert "facebook" in listing.error_message

    @pytest.mark.asyncio
    async def test_resync_clears_resolved_discrepancies(self, service, router, location, facebook_credential):
        router.add("GET", "/v24.0/pg1", PAGE_DETAILS)
        listing = await service.sync_from_platform(location, "facebook")
        assert listing.has_discrepancies

        router.add("GET", "/v24.0/pg1", dict(PAGE_DETAILS, phone=" 555-0100 "))
        listing = await service.sync_from_platform(location, "facebook")

        assert listing.discrepancies == {}

    @pytest.mark.asyncio
    async def test_without_credential_nothing_is_attempted(self, service, router, location):
        assert await service.sync_from_platform(location, "facebook") is None
        assert router.requests == []

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, service, location):
        with pytest.raises(UnsupportedPlatformError):
            await service.sync_from_platform(location, "youtube")

    @pytest.mark.asyncio
    async def test_business_profile_link_then_sync(self, service, router, gmb_location):
        await service.link_listing(gmb_location, "google_my_business", "locations/42")
        router.add("GET", "/v1/locations/42", {
            "name": "locations/42",
            "title": "Acme Coffee Mall",
            "phoneNumbers": {"primaryPhone": "555-0300"},
            "storefrontAddress": {"addressLines": ["9 Mall Road"], "locality": "Springfield"},
            "categories": {"primaryCategory": {"displayName": "Cafe"}},
            "latlng": {"latitude": 39.78, "longitude": -89.65},
        })

        listing = await service.sync_from_platform(gmb_location, "google_my_business")

        assert listing.status == ListingStatus.SYNCED.value
        assert listing.categories == ["Cafe"]
        assert listing.discrepancies == {"address": {"local": "9 Mall Rd", "platform": "9 Mall Road"}}
        call = router.calls_to("GET", "/v1/locations/42")[0]
        assert call.headers["Authorization"] == "Bearer gmb-token"
        assert "title" in call.url.params["readMask"]


class TestPublishToPlatform:

    @pytest.mark.asyncio
    async def test_publish_pushes_local_profile(self, service, db_session, router, location, facebook_credential):
        db_session.add(Listing(location_id=location.id, platform="facebook", external_id="pg1", status="error"))
        await db_session.commit()
        router.add("POST", "/v24.0/pg1", {"success": True})

        assert await service.publish_to_platform(location, "facebook") is True

        form = router.form(router.calls_to("POST", "/v24.0/pg1")[0])
        assert form["about"] == "Acme Coffee Downtown"
        assert form["phone"] == "555-0100"
        assert form["website"] == "https://acme.example"
        listing = await service.get_listing(location, "facebook")
        assert listing.status == ListingStatus.SYNCED.value
        assert listing.last_published_at is not None
        assert listing.error_message is None

    @pytest.mark.asyncio
    async def test_publish_failure_marks_listing(self, service, db_session, router, location, facebook_credential):
        db_session.add(Listing(location_id=location.id, platform="facebook", external_id="pg1", status="synced"))
        await db_session.commit()
        router.add("POST", "/v24.0/pg1", {"error": {"message": "Permission denied"}}, status_code=403)

        assert await service.publish_to_platform(location, "facebook") is False
        listing = await service.get_listing(location, "facebook")
        assert listing.status == ListingStatus.ERROR.value

    @pytest.mark.asyncio
    async def test_business_profile_patch_uses_update_mask(self, service, router, gmb_location):
        await service.link_listing(gmb_location, "google_my_business", "accounts/123/locations/42")
        router.add("PATCH", "/v1/locations/42", {"name": "locations/42"})

        assert await service.publish_to_platform(gmb_location, "google_my_business") is True

        call = router.calls_to("PATCH", "/v1/locations/42")[0]
        body = router.body(call)
        assert body["title"] == "Acme Coffee Mall"
        assert body["storefrontAddress"] == {"addressLines": ["9 Mall Rd"], "locality": "Springfield"}
        assert call.url.params["updateMask"] == "phoneNumbers,storefrontAddress,title"


class TestAllPlatforms:

    @pytest.mark.asyncio
    async def test_sync_all_reports_each_listing_platform(self, service, router, location, facebook_credential):
        router.add("GET", "/v24.0/pg1", PAGE_DETAILS)

        results = await service.sync_all_platforms(location)

        assert set(results) == {"facebook", "google_my_business"}
        assert results["facebook"].status == ListingStatus.SYNCED.value
        assert results["google_my_business"] is None

    @pytest.mark.asyncio
    async def test_publish_all_distinguishes_skipped_from_failed(self, service, router, location, facebook_credential):
        router.add("POST", "/v24.0/pg1", {"error": {"message": "Bad"}}, status_code=400)

        results = await service.publish_to_all_platforms(location)

        assert results == {"facebook": False, "google_my_business": None}


class TestListingStats:

    @pytest.mark.asyncio
    async def test_stats(self, service, db_session, tenant, location, unlinked_location):
        db_session.add_all([
            Listing(location_id=location.id, platform="facebook", status="synced", discrepancies={"phone": {"local": "1", "platform": "2"}}),
            Listing(location_id=location.id, platform="google_my_business", status="error", discrepancies={}),
            Listing(location_id=unlinked_location.id, platform="facebook", status="pending"),
        ])
        await db_session.commit()

        stats = await service.get_stats(tenant)

        assert stats["total_listings"] == 3
        assert stats["by_platform"] == {"facebook": 2, "google_my_business": 1}
        assert stats["by_status"] == {"pending": 1, "active": 0, "synced": 1, "error": 1}
        assert stats["with_discrepancies"] == 1
        assert stats["recently_synced"] == 0

        location_stats = await service.get_stats(tenant, location)
        assert location_stats["total_listings"] == 2


class TestPublishNotAttempted:

    @pytest.mark.asyncio
    async def test_publish_without_credential_is_not_attempted(self, service, router, location):
        assert await service.publish_to_platform(location, "facebook") is None
        assert router.requests == []

    @pytest.mark.asyncio
    async def test_publish_without_bound_profile_is_not_attempted(self, service, router, gmb_location):
        assert await service.publish_to_platform(gmb_location, "google_my_business") is None
        assert router.requests == []
