"""
Platform adapter contract.

One adapter per external platform; the services select adapters from the
registry by platform id and never branch on platform names themselves.
Adapters turn remote failures into sentinels (empty list, None, False) so a
failing platform never aborts work on the others.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.enums import PlatformName, ResponseStatus
from app.core.exceptions import PlatformAPIError
from app.core.utils import upsert
from app.models.listing import Listing
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.models.review_response import ReviewResponse
from app.schemas.metadata import metadata_model_for
from app.schemas.normalized import ExternalReply, NormalizedListing, NormalizedReview

logger = logging.getLogger(__name__)


class PlatformAdapter(ABC):
    platform: PlatformName
    supports_reply: bool = True
    supports_listing: bool = False
    requires_credential: bool = True
    # Adapter is only consulted when no credential resolves for this platform
    fallback_for: Optional[PlatformName] = None

    def __init__(self, db: AsyncSession, settings=None, transport=None):
        self.db = db
        self.settings = settings or get_settings()
        self.transport = transport

    @property
    def key(self) -> str:
        return self.platform.value

    def is_linked(self, location: Location) -> bool:
        return location.linking_value(self.platform) is not None

    async def resolve_account(self, location: Location, credential: Optional[PlatformCredential]) -> Optional[str]:
        """
        Remote account/resource id reviews are fetched for.

        May read the database, so callers run it before any concurrent
        fan-out. None means the platform cannot be synced for this location.
        """
        return location.linking_value(self.platform)

    # Reviews

    async def fetch_remote_reviews(
        self,
        location: Location,
        credential: Optional[PlatformCredential],
        account_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Raw review payloads; logs and returns [] on any remote failure."""
        account_id = account_id or location.linking_value(self.platform)
        try:
            return await self._fetch_reviews(location, credential, account_id)
        except PlatformAPIError as e:
            logger.warning(
                f"{self.key} review fetch failed for location {location.id} "
                f"(status={e.status_code}): {str(e)}"
            )
            return []

    @abstractmethod
    async def _fetch_reviews(
        self,
        location: Location,
        credential: Optional[PlatformCredential],
        account_id: Optional[str],
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        """Map one raw payload; None skips the item."""

    async def normalize_and_upsert(self, raw: Dict[str, Any], location: Location) -> Optional[Review]:
        normalized = self.normalize_review(raw, location)
        if normalized is None:
            return None

        review, created = await upsert(
            self.db,
            Review,
            {"location_id": location.id, "platform": self.key, "external_id": normalized.external_id},
            normalized.review_values(),
        )
        if normalized.external_reply is not None:
            await self._sync_external_reply(review, normalized.external_reply)
        return review

    async def upsert_reviews(self, raws: List[Dict[str, Any]], location: Location) -> int:
        count = 0
        for raw in raws:
            if await self.normalize_and_upsert(raw, location) is not None:
                count += 1
        return count

    async def sync_reviews(self, location: Location, credential: Optional[PlatformCredential]) -> int:
        """Fetch and store reviews for one location; 0 when nothing could be fetched."""
        account_id = await self.resolve_account(location, credential)
        if account_id is None:
            return 0
        raws = await self.fetch_remote_reviews(location, credential, account_id)
        return await self.upsert_reviews(raws, location)

    async def _sync_external_reply(self, review: Review, reply: ExternalReply) -> ReviewResponse:
        """A reply written on the platform is stored as already published."""
        response, _ = await upsert(
            self.db,
            ReviewResponse,
            {"review_id": review.id},
            {
                "content": reply.content,
                "status": ResponseStatus.PUBLISHED.value,
                "published_at": reply.published_at,
                "user_id": None,
                "platform_synced": True,
            },
        )
        return response

    # Replies

    def reply_target(self, review: Review) -> Optional[str]:
        return metadata_model_for(self.platform).parse(review.meta).reply_target_id

    async def publish_reply(
        self,
        review: Review,
        response: ReviewResponse,
        credential: Optional[PlatformCredential],
    ) -> bool:
        """Post ``response`` to the platform; marks it published and synced on success."""
        target = self.reply_target(review)
        if not target:
            logger.error(f"{self.key} review {review.id} has no reply target in its metadata")
            return False

        try:
            await self._post_reply(review, target, response.content, credential)
        except PlatformAPIError as e:
            logger.error(f"{self.key} reply to review {review.id} failed (status={e.status_code}): {str(e)}")
            return False

        response.publish(platform_synced=True)
        logger.info(f"Published response {response.id} to {self.key} review {review.id}")
        return True

    async def _post_reply(
        self,
        review: Review,
        target: str,
        content: str,
        credential: Optional[PlatformCredential],
    ) -> None:
        raise NotImplementedError(f"{self.key} does not support replies")

    # Listings

    async def fetch_listing(
        self,
        location: Location,
        credential: PlatformCredential,
        external_id: str,
    ) -> Optional[NormalizedListing]:
        """Remote profile for ``external_id``; logs and returns None on failure."""
        try:
            raw = await self._fetch_listing(credential, external_id)
        except PlatformAPIError as e:
            logger.warning(
                f"{self.key} listing fetch failed for location {location.id} "
                f"(status={e.status_code}): {str(e)}"
            )
            return None
        return self.normalize_listing(raw)

    async def _fetch_listing(self, credential: PlatformCredential, external_id: str) -> Dict[str, Any]:
        raise NotImplementedError(f"{self.key} does not support listings")

    def normalize_listing(self, raw: Dict[str, Any]) -> NormalizedListing:
        raise NotImplementedError(f"{self.key} does not support listings")

    async def push_listing(
        self,
        location: Location,
        listing: Optional[Listing],
        credential: PlatformCredential,
        external_id: str,
    ) -> bool:
        """Write the location's local profile to the platform."""
        try:
            await self._push_listing(location, credential, external_id)
        except PlatformAPIError as e:
            logger.error(f"{self.key} listing publish failed for location {location.id} (status={e.status_code}): {str(e)}")
            return False
        return True

    async def _push_listing(self, location: Location, credential: PlatformCredential, external_id: str) -> None:
        raise NotImplementedError(f"{self.key} does not support listings")

    def listing_external_id(self, location: Location, listing: Optional[Listing], credential: PlatformCredential) -> Optional[str]:
        if listing is not None and listing.external_id:
            return listing.external_id
        return location.linking_value(self.platform)
