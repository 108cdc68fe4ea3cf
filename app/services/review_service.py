"""
Review sync orchestration and the review-response workflow.

A location sync runs in three phases: planning (linking checks, credential
resolution and account lookup, all against the session, one platform at a
time), a concurrent fan-out of the remote fetches, then sequential upserts,
each platform inside its own savepoint so one platform's bad data cannot undo
another's.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.enums import PublishFailureReason, ResponseStatus
from app.core.exceptions import (
    AmbiguousCredentialError,
    CredentialError,
    CredentialExpiredError,
    InvalidResponseStateError,
    ResponsePublishError,
)
from app.core.utils import utcnow
from app.integrations.base import PlatformAdapter
from app.integrations.registry import build_adapter_registry
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.models.review_response import ReviewResponse
from app.services.credential_resolver import CredentialResolver

logger = logging.getLogger(__name__)

RESPONSE_EDITABLE_FIELDS = ("content", "tone", "language", "ai_generated")

SyncPlan = Tuple[str, PlatformAdapter, Optional[PlatformCredential], str]


def _tenant_id(tenant) -> int:
    return tenant if isinstance(tenant, int) else tenant.id


class ReviewService:
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

    # Sync

    async def _plan_sync(self, location: Location) -> List[SyncPlan]:
        plans: List[SyncPlan] = []
        credentialed = set()

        for key, adapter in self.adapters.items():
            if not adapter.is_linked(location):
                logger.debug(f"Location {location.id} is not linked to {key}, skipping")
                continue
            if adapter.fallback_for is not None and adapter.fallback_for.value in credentialed:
                continue

            credential = None
            if adapter.requires_credential:
                try:
                    credential = await self.resolver.resolve(location, adapter.platform)
                except CredentialError as e:
                    logger.info(f"Skipping {key} review sync for location {location.id}: {str(e)}")
                    continue
                credentialed.add(key)

            account_id = await adapter.resolve_account(location, credential)
            if account_id is None:
                continue
            plans.append((key, adapter, credential, account_id))

        return plans

    async def sync_reviews_for_location(self, location: Location) -> Dict[str, int]:
        """
        Sync every platform the location is linked to.

        Returns a count per registered platform; a platform that was skipped
        or failed reports 0. ``reviews_synced_at`` is updated even when every
        count is 0.
        """
        counts = {key: 0 for key in self.adapters}
        plans = await self._plan_sync(location)

        results = await asyncio.gather(
            *(adapter.fetch_remote_reviews(location, credential, account_id)
              for _, adapter, credential, account_id in plans),
            return_exceptions=True,
        )

        for (key, adapter, _, _), raws in zip(plans, results):
            if isinstance(raws, BaseException):
                logger.error(f"{key} review fetch raised for location {location.id}: {raws!r}")
                continue
            try:
                async with self.db.begin_nested():
                    counts[key] = await adapter.upsert_reviews(raws, location)
            except Exception as e:
                logger.exception(f"Storing {key} reviews failed for location {location.id}: {str(e)}")
                counts[key] = 0

        location.reviews_synced_at = utcnow()
        await self.db.commit()

        logger.info(f"Review sync for location {location.id}: {counts}")
        return counts

    # Responses

    async def create_response(
        self,
        review: Review,
        content: str,
        user_id: Optional[int] = None,
        ai_generated: bool = False,
        tone: Optional[str] = None,
        language: Optional[str] = None,
    ) -> ReviewResponse:
        existing = (await self.db.execute(
            select(ReviewResponse).where(ReviewResponse.review_id == review.id)
        )).scalars().first()
        if existing is not None:
            raise InvalidResponseStateError(f"Review {review.id} already has response {existing.id}")

        response = ReviewResponse(
            review_id=review.id,
            user_id=user_id,
            content=content,
            status=ResponseStatus.DRAFT.value,
            ai_generated=ai_generated,
            tone=tone,
            language=language,
        )
        self.db.add(response)
        await self.db.commit()
        return response

    async def update_response(self, response: ReviewResponse, **fields: Any) -> ReviewResponse:
        if response.is_published():
            raise InvalidResponseStateError("Published responses cannot be edited")
        for key, value in fields.items():
            if key not in RESPONSE_EDITABLE_FIELDS:
                raise ValueError(f"Field '{key}' cannot be updated")
            setattr(response, key, value)
        await self.db.commit()
        return response

    async def approve_response(self, response: ReviewResponse, user_id: Optional[int]) -> ReviewResponse:
        response.approve(user_id)
        await self.db.commit()
        return response

    async def reject_response(self, response: ReviewResponse, reason: str) -> ReviewResponse:
        response.reject(reason)
        await self.db.commit()
        return response

    async def resubmit_response(self, response: ReviewResponse, content: Optional[str] = None) -> ReviewResponse:
        response.resubmit(content)
        await self.db.commit()
        return response

    async def delete_response(self, response: ReviewResponse) -> None:
        await self.db.delete(response)
        await self.db.commit()

    async def publish_response(self, response: ReviewResponse) -> ReviewResponse:
        """
        Publish a response to the review's platform.

        Raises:
            InvalidResponseStateError: the response is rejected
            ResponsePublishError: nothing was published; ``reason`` says why
        """
        if response.is_rejected():
            raise InvalidResponseStateError("Rejected responses must be resubmitted before publishing")
        if response.is_published() and response.platform_synced:
            return response

        review = await self.db.get(Review, response.review_id)
        location = await self.db.get(Location, review.location_id)
        platform = review.platform

        adapter = self.adapters.get(platform)
        if adapter is None:
            raise ResponsePublishError(platform, PublishFailureReason.UNSUPPORTED_PLATFORM)

        if not adapter.supports_reply:
            response.publish(platform_synced=False)
            await self.db.commit()
            logger.info(f"Marked response {response.id} published locally ({platform} has no reply API)")
            return response

        try:
            credential = await self.resolver.resolve(location, platform)
        except CredentialExpiredError as e:
            raise ResponsePublishError(platform, PublishFailureReason.EXPIRED_CREDENTIAL, str(e))
        except AmbiguousCredentialError as e:
            raise ResponsePublishError(platform, PublishFailureReason.AMBIGUOUS_CREDENTIAL, str(e))
        except CredentialError as e:
            raise ResponsePublishError(platform, PublishFailureReason.NO_CREDENTIAL, str(e))

        if not adapter.reply_target(review):
            raise ResponsePublishError(platform, PublishFailureReason.MISSING_REPLY_TARGET)

        if not await adapter.publish_reply(review, response, credential):
            raise ResponsePublishError(platform, PublishFailureReason.REMOTE_REJECTED)

        await self.db.commit()
        return response

    # Stats

    async def get_stats(self, tenant, location: Optional[Location] = None) -> Dict[str, Any]:
        if location is not None:
            scope = Review.location_id == location.id
        else:
            location_ids = select(Location.id).where(Location.tenant_id == _tenant_id(tenant))
            scope = Review.location_id.in_(location_ids)

        total, average = (await self.db.execute(
            select(func.count(Review.id), func.avg(Review.rating)).where(scope)
        )).one()

        distribution_rows = (await self.db.execute(
            select(Review.rating, func.count(Review.id)).where(scope).group_by(Review.rating)
        )).all()
        by_rating = {rating: count for rating, count in distribution_rows}

        platform_rows = (await self.db.execute(
            select(Review.platform, func.count(Review.id), func.avg(Review.rating))
            .where(scope)
            .group_by(Review.platform)
            .order_by(Review.platform)
        )).all()

        return {
            "total_reviews": total,
            "average_rating": round(float(average), 1) if total else 0,
            "rating_distribution": {rating: by_rating.get(rating, 0) for rating in range(5, 0, -1)},
            "by_platform": {
                platform: {"count": count, "average_rating": round(float(avg or 0), 1)}
                for platform, count, avg in platform_rows
            },
        }
