import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import PublishFailureReason
from app.core.exceptions import InvalidResponseStateError, ResponsePublishError
from app.dependencies import get_db, get_location, get_review_service
from app.models.location import Location
from app.models.review import Review
from app.models.review_response import ReviewResponse
from app.schemas.review import ReviewResponseRead, ReviewStats
from app.services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tenants/{tenant_id}", tags=["reviews"])

PUBLISH_ERROR_STATUS = {
    PublishFailureReason.NO_CREDENTIAL: 409,
    PublishFailureReason.EXPIRED_CREDENTIAL: 409,
    PublishFailureReason.AMBIGUOUS_CREDENTIAL: 409,
    PublishFailureReason.MISSING_REPLY_TARGET: 422,
    PublishFailureReason.REMOTE_REJECTED: 502,
    PublishFailureReason.UNSUPPORTED_PLATFORM: 400,
}


@router.post("/locations/{location_id}/reviews/sync")
async def sync_location_reviews(
    location: Location = Depends(get_location),
    service: ReviewService = Depends(get_review_service),
):
    """Sync reviews from every platform linked to the location."""
    counts = await service.sync_reviews_for_location(location)
    return {
        "location_id": location.id,
        "counts": counts,
        "total": sum(counts.values()),
        "reviews_synced_at": location.reviews_synced_at,
    }


@router.post("/responses/{response_id}/publish", response_model=ReviewResponseRead)
async def publish_review_response(
    tenant_id: int,
    response_id: int,
    db: AsyncSession = Depends(get_db),
    service: ReviewService = Depends(get_review_service),
):
    stmt = (
        select(ReviewResponse)
        .join(Review, Review.id == ReviewResponse.review_id)
        .join(Location, Location.id == Review.location_id)
        .where(ReviewResponse.id == response_id, Location.tenant_id == tenant_id)
    )
    response = (await db.execute(stmt)).scalars().first()
    if response is None:
        raise HTTPException(status_code=404, detail=f"Response {response_id} not found")

    try:
        response = await service.publish_response(response)
    except InvalidResponseStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ResponsePublishError as e:
        logger.warning(f"Publishing response {response_id} failed: {str(e)}")
        raise HTTPException(
            status_code=PUBLISH_ERROR_STATUS.get(e.reason, 502),
            detail={"platform": e.platform, "reason": e.reason.value, "message": str(e)},
        )
    await db.refresh(response)
    return ReviewResponseRead.from_orm_model(response)


@router.get("/reviews/stats", response_model=ReviewStats)
async def review_stats(
    tenant_id: int,
    location_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    service: ReviewService = Depends(get_review_service),
):
    location = None
    if location_id is not None:
        location = await get_location(tenant_id, location_id, db)
    return await service.get_stats(tenant_id, location)
