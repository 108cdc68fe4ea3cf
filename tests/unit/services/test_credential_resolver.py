# tests/unit/services/test_credential_resolver.py
import pytest

from app.core.exceptions import AmbiguousCredentialError, CredentialExpiredError, CredentialNotFoundError
from app.models import Location
from app.services.credential_resolver import CredentialResolver
from tests.mocks import add_credential


@pytest.mark.asyncio
async def test_facebook_uses_credential_bound_to_page(db_session, settings, tenant, location):
    await add_credential(db_session, tenant, "facebook", external_id="pg2", meta={"page_id": "pg2"})
    bound = await add_credential(db_session, tenant, "facebook", external_id="pg1", meta={"page_id": "pg1"})

    resolver = CredentialResolver(db_session, settings)
    assert (await resolver.resolve(location, "facebook")).id == bound.id
    # Instagram shares the Page's Facebook credential
    assert (await resolver.resolve(location, "instagram")).id == bound.id


@pytest.mark.asyncio
async def test_facebook_bound_page_never_falls_back_to_other_page(db_session, settings, tenant, location):
    await add_credential(db_session, tenant, "facebook", external_id="pg2", meta={"page_id": "pg2"})

    resolver = CredentialResolver(db_session, settings)
    with pytest.raises(CredentialNotFoundError):
        await resolver.resolve(location, "facebook")


@pytest.mark.asyncio
async def test_facebook_accepts_legacy_row_naming_the_page(db_session, settings, tenant, location):
    legacy = await add_credential(db_session, tenant, "facebook", external_id=None, meta={"page_id": "pg1"})

    resolver = CredentialResolver(db_session, settings)
    assert (await resolver.resolve(location, "facebook")).id == legacy.id


@pytest.mark.asyncio
async def test_inactive_bound_credential_is_not_found(db_session, settings, tenant, location):
    await add_credential(db_session, tenant, "facebook", external_id="pg1", is_active=False)

    with pytest.raises(CredentialNotFoundError):
        await CredentialResolver(db_session, settings).resolve(location, "facebook")


@pytest.mark.asyncio
async def test_expired_credential_fails_before_use(db_session, settings, tenant, location, past):
    await add_credential(db_session, tenant, "facebook", external_id="pg1", expires_at=past)

    with pytest.raises(CredentialExpiredError):
        await CredentialResolver(db_session, settings).resolve(location, "facebook")


@pytest.mark.asyncio
async def test_other_tenants_credentials_are_invisible(db_session, settings, other_tenant, location):
    await add_credential(db_session, other_tenant, "facebook", external_id="pg1")

    with pytest.raises(CredentialNotFoundError):
        await CredentialResolver(db_session, settings).resolve(location, "facebook")


@pytest.mark.asyncio
async def test_generic_prefers_row_bound_to_linking_value(db_session, settings, tenant):
    location = Location(tenant_id=tenant.id, name="App", google_play_package_name="com.acme.two")
    db_session.add(location)
    await db_session.commit()
    await add_credential(db_session, tenant, "google_play", external_id="com.acme.one")
    bound = await add_credential(db_session, tenant, "google_play", external_id="com.acme.two")

    assert (await CredentialResolver(db_session, settings).resolve(location, "google_play")).id == bound.id


@pytest.mark.asyncio
async def test_generic_single_row_and_legacy_fallbacks(db_session, settings, tenant):
    location = Location(tenant_id=tenant.id, name="Channel", youtube_channel_id="UC1")
    db_session.add(location)
    await db_session.commit()

    only = await add_credential(db_session, tenant, "youtube", external_id="UC-other")
    resolver = CredentialResolver(db_session, settings)
    assert (await resolver.resolve(location, "youtube")).id == only.id

    legacy = await add_credential(db_session, tenant, "youtube", external_id=None)
    assert (await resolver.resolve(location, "youtube")).id == legacy.id


@pytest.mark.asyncio
async def test_ambiguous_generic_fallback_uses_lowest_id(db_session, settings, tenant):
    location = Location(tenant_id=tenant.id, name="Branch", google_place_id="place-1")
    db_session.add(location)
    await db_session.commit()
    first = await add_credential(db_session, tenant, "google_my_business", external_id="accounts/1")
    await add_credential(db_session, tenant, "google_my_business", external_id="accounts/2")

    assert (await CredentialResolver(db_session, settings).resolve(location, "google_my_business")).id == first.id


@pytest.mark.asyncio
async def test_ambiguous_generic_fallback_fails_under_strict_binding(db_session, settings, tenant):
    location = Location(tenant_id=tenant.id, name="Branch", google_place_id="place-1")
    db_session.add(location)
    await db_session.commit()
    await add_credential(db_session, tenant, "google_my_business", external_id="accounts/1")
    await add_credential(db_session, tenant, "google_my_business", external_id="accounts/2")

    strict = settings.model_copy(update={"STRICT_CREDENTIAL_BINDING": True})
    with pytest.raises(AmbiguousCredentialError):
        await CredentialResolver(db_session, strict).resolve(location, "google_my_business")
