"""
Listing sync and publish across the platforms that expose profile data.
"""
import asyncio
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.enums import ListingStatus, PlatformName
from app.core.exceptions import CredentialError, UnsupportedPlatformError
from app.core.utils import upsert, utcnow
from app.integrations.base import PlatformAdapter
from app.integrations.registry import build_adapter_registry
from app.models.listing import Listing
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.schemas.normalized import NormalizedListing
from app.services.credential_resolver import CredentialResolver
from app.services.discrepancy_detector import detect_discrepancies

logger = logging.getLogger(__name__)

ListingPlan = Tuple[PlatformAdapter, PlatformCredential, Optional[Listing], str]


def _tenant_id(tenant) -> int:
    return tenant if isinstance(tenant, int) else tenant.id


class ListingService:
    def __init__(
        self,
        db: AsyncSession,
        settings=None,
        adapters: Optional[Dict[str, PlatformAdapter]] = None,
        transport=None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.adapters = adapters if adapters is not None else build_adapter_registry(db, self.settings, transport)
        self.resolver = CredentialResolver(db, self.settings)

    @property
    def listing_platforms(self) -> List[str]:
        return [key for key, adapter in self.adapters.items() if adapter.supports_listing]

    def _adapter(self, platform) -> PlatformAdapter:
        key = PlatformName(platform).value
        adapter = self.adapters.get(key)
        if adapter is None or not adapter.supports_listing:
            raise UnsupportedPlatformError(f"Listings are not supported for platform '{key}'")
        return adapter

    async def get_listing(self, location: Location, platform) -> Optional[Listing]:
        stmt = select(Listing).where(
            Listing.location_id == location.id,
            Listing.platform == PlatformName(platform).value,
        )
        return (await self.db.execute(stmt)).scalars().first()

    async def link_listing(self, location: Location, platform, external_id: str) -> Listing:
        """Bind the location to a remote profile; the listing stays pending until synced."""
        adapter = self._adapter(platform)
        listing, created = await upsert(
            self.db,
            Listing,
            {"location_id": location.id, "platform": adapter.key},
            {"external_id": external_id},
        )
        await self.db.commit()
        logger.info(f"{'Linked' if created else 'Re-linked'} location {location.id} to {adapter.key} {external_id}")
        return listing

    async def _plan(self, location: Location, platform) -> Optional[ListingPlan]:
        adapter = self._adapter(platform)
        try:
            credential = await self.resolver.resolve(location, adapter.platform)
        except CredentialError as e:
            logger.info(f"Skipping {adapter.key} listing for location {location.id}: {str(e)}")
            return None

        listing = await self.get_listing(location, adapter.key)
        external_id = adapter.listing_external_id(location, listing, credential)
        if not external_id:
            logger.info(f"No {adapter.key} profile bound to location {location.id}")
            return None
        return adapter, credential, listing, external_id

    async def _store_sync(
        self,
        location: Location,
        adapter: PlatformAdapter,
        listing: Optional[Listing],
        normalized: Optional[NormalizedListing],
    ) -> Optional[Listing]:
        if normalized is None:
            # A failed fetch never creates a listing
            if listing is not None:
                listing.mark_as_error(f"Failed to fetch listing from {adapter.key}")
                await self.db.commit()
            return None

        listing, _ = await upsert(
            self.db,
            Listing,
            {"location_id": location.id, "platform": adapter.key},
            normalized.listing_values(),
        )
        listing.mark_as_synced()
        listing.set_discrepancies(detect_discrepancies(location, listing))
        await self.db.commit()

        if listing.has_discrepancies:
            logger.info(f"{adapter.key} listing {listing.id} differs from location {location.id} on {sorted(listing.discrepancies)}")
        return listing

    async def _store_publish(self, adapter: PlatformAdapter, listing: Optional[Listing], success: bool) -> bool:
        if listing is not None:
            if success:
                listing.mark_as_published()
            else:
                listing.mark_as_error(f"Failed to publish listing to {adapter.key}")
            await self.db.commit()
        return success

    async def sync_from_platform(self, location: Location, platform) -> Optional[Listing]:
        """Refresh the local mirror from the platform; None when not attempted or failed."""
        plan = await self._plan(location, platform)
        if plan is None:
            return None
        adapter, credential, listing, external_id = plan
        normalized = await adapter.fetch_listing(location, credential, external_id)
        return await self._store_sync(location, adapter, listing, normalized)

    async def publish_to_platform(self, location: Location, platform) -> Optional[bool]:
        """Push the local profile; None when it could not be attempted."""
        plan = await self._plan(location, platform)
        if plan is None:
            return None
        adapter, credential, listing, external_id = plan
        success = await adapter.push_listing(location, listing, credential, external_id)
        return await self._store_publish(adapter, listing, success)

    async def _plan_all(self, location: Location) -> Dict[str, ListingPlan]:
        plans: Dict[str, ListingPlan] = {}
        for key in self.listing_platforms:
            plan = await self._plan(location, key)
            if plan is not None:
                plans[key] = plan
        return plans

    async def sync_all_platforms(self, location: Location) -> Dict[str, Optional[Listing]]:
        results: Dict[str, Optional[Listing]] = {key: None for key in self.listing_platforms}
        plans = await self._plan_all(location)

        fetched = await asyncio.gather(
            *(adapter.fetch_listing(location, credential, external_id)
              for adapter, credential, _, external_id in plans.values()),
            return_exceptions=True,
        )
        for (key, (adapter, _, listing, _)), normalized in zip(plans.items(), fetched):
            if isinstance(normalized, BaseException):
                logger.error(f"{key} listing fetch raised for location {location.id}: {normalized!r}")
                normalized = None
            results[key] = await self._store_sync(location, adapter, listing, normalized)

        synced = sum(1 for listing in results.values() if listing is not None)
        logger.info(f"Listing sync for location {location.id}: {synced} of {len(results)} platforms succeeded")
        return results

    async def publish_to_all_platforms(self, location: Location) -> Dict[str, Optional[bool]]:
        """Per platform: True/False when attempted, None when it could not be attempted."""
        results: Dict[str, Optional[bool]] = {key: None for key in self.listing_platforms}
        plans = await self._plan_all(location)

        pushed = await asyncio.gather(
            *(adapter.push_listing(location, listing, credential, external_id)
              for adapter, credential, listing, external_id in plans.values()),
            return_exceptions=True,
        )
        for (key, (adapter, _, listing, _)), success in zip(plans.items(), pushed):
            if isinstance(success, BaseException):
                logger.error(f"{key} listing publish raised for location {location.id}: {success!r}")
                success = False
            results[key] = await self._store_publish(adapter, listing, success)

        return results

    async def get_stats(self, tenant, location: Optional[Location] = None) -> Dict[str, Any]:
        if location is not None:
            scope = Listing.location_id == location.id
        else:
            location_ids = select(Location.id).where(Location.tenant_id == _tenant_id(tenant))
            scope = Listing.location_id.in_(location_ids)

        total = (await self.db.execute(select(func.count(Listing.id)).where(scope))).scalar_one()

        by_platform = {key: 0 for key in self.listing_platforms}
        for platform, count in (await self.db.execute(
            select(Listing.platform, func.count(Listing.id)).where(scope).group_by(Listing.platform)
        )).all():
            by_platform[platform] = count

        by_status = {status.value: 0 for status in ListingStatus}
        for status, count in (await self.db.execute(
            select(Listing.status, func.count(Listing.id)).where(scope).group_by(Listing.status)
        )).all():
            by_status[status] = count

        # JSON emptiness is not comparable portably in SQL
        discrepancy_bags = (await self.db.execute(select(Listing.discrepancies).where(scope))).scalars().all()

        window_start = utcnow() - timedelta(hours=self.settings.RECENT_SYNC_WINDOW_HOURS)
        recently_synced = (await self.db.execute(
            select(func.count(Listing.id)).where(scope, Listing.last_synced_at >= window_start)
        )).scalar_one()

        return {
            "total_listings": total,
            "by_platform": by_platform,
            "by_status": by_status,
            "with_discrepancies": sum(1 for bag in discrepancy_bags if bag),
            "recently_synced": recently_synced,
        }
