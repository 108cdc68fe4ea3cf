# tests/unit/services/google/test_google_auth.py
import pytest
import httpx

from app.core.exceptions import GoogleAuthError
from app.models import PlatformCredential
from app.services.google.auth import GoogleAuthManager


@pytest.mark.asyncio
async def test_unexpired_token_is_used_without_refresh(settings, router, future):
    manager = GoogleAuthManager(settings, transport=router.transport)
    credential = PlatformCredential(access_token="stored", refresh_token="refresh", expires_at=future)

    assert await manager.get_access_token(credential) == "stored"
    assert router.requests == []


@pytest.mark.asyncio
async def test_token_without_expiry_is_refreshed_and_not_persisted(settings, router):
    router.add("POST", "/token", {"access_token": "fresh", "expires_in": 3599})
    manager = GoogleAuthManager(settings, transport=router.transport)
    credential = PlatformCredential(access_token="stored", refresh_token="refresh", expires_at=None)

    assert await manager.get_access_token(credential) == "fresh"
    assert credential.access_token == "stored"

    form = router.form(router.requests[0])
    assert form == {
        "grant_type": "refresh_token",
        "refresh_token": "refresh",
        "client_id": "google-client",
        "client_secret": "google-secret",
    }


@pytest.mark.asyncio
async def test_no_refresh_token_falls_back_to_stored_token(settings, router):
    manager = GoogleAuthManager(settings, transport=router.transport)
    credential = PlatformCredential(access_token="stored", refresh_token=None, expires_at=None)

    assert await manager.get_access_token(credential) == "stored"
    assert router.requests == []


@pytest.mark.asyncio
async def test_refresh_failure_raises(settings, router):
    router.add("POST", "/token", {"error": "invalid_grant"}, status_code=400)
    manager = GoogleAuthManager(settings, transport=router.transport)

    with pytest.raises(GoogleAuthError) as exc_info:
        await manager.refresh_access_token("revoked")
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_refresh_network_error_raises(settings, router):
    router.add("POST", "/token", httpx.ConnectError("connection refused"))
    manager = GoogleAuthManager(settings, transport=router.transport)

    with pytest.raises(GoogleAuthError):
        await manager.refresh_access_token("refresh")


@pytest.mark.asyncio
async def test_refresh_without_token_raises(settings):
    with pytest.raises(GoogleAuthError):
        await GoogleAuthManager(settings).refresh_access_token("")


@pytest.mark.asyncio
async def test_non_json_token_response_raises(settings, router):
    router.add("POST", "/token", "<html>Service Unavailable</html>")
    manager = GoogleAuthManager(settings, transport=router.transport)

    with pytest.raises(GoogleAuthError) as exc_info:
        await manager.refresh_access_token("refresh")
    assert exc_info.value.status_code == 200
