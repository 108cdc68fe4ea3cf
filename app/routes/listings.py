from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import PlatformName
from app.core.exceptions import UnsupportedPlatformError
from app.dependencies import get_db, get_listing_service, get_location
from app.models.location import Location
from app.schemas.listing import ListingRead, ListingStats
from app.services.listing_service import ListingService

router = APIRouter(prefix="/api/tenants/{tenant_id}", tags=["listings"])


async def _listing_payload(db: AsyncSession, listing):
    if listing is None:
        return None
    await db.refresh(listing)
    return ListingRead.from_orm_model(listing)


@router.post("/locations/{location_id}/listings/sync")
async def sync_all_listings(
    location: Location = Depends(get_location),
    db: AsyncSession = Depends(get_db),
    service: ListingService = Depends(get_listing_service),
):
    results = await service.sync_all_platforms(location)
    return {
        "results": {platform: await _listing_payload(db, listing) for platform, listing in results.items()},
        "succeeded": sum(1 for listing in results.values() if listing is not None),
        "total": len(results),
    }


@router.post("/locations/{location_id}/listings/publish")
async def publish_all_listings(
    location: Location = Depends(get_location),
    service: ListingService = Depends(get_listing_service),
):
    results = await service.publish_to_all_platforms(location)
    return {
        "results": results,
        "succeeded": sum(1 for success in results.values() if success),
        "total": len(results),
    }


@router.post("/locations/{location_id}/listings/{platform}/sync")
async def sync_listing(
    platform: PlatformName,
    location: Location = Depends(get_location),
    db: AsyncSession = Depends(get_db),
    service: ListingService = Depends(get_listing_service),
):
    try:
        listing = await service.sync_from_platform(location, platform)
    except UnsupportedPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"platform": platform.value, "success": listing is not None, "listing": await _listing_payload(db, listing)}


@router.post("/locations/{location_id}/listings/{platform}/publish")
async def publish_listing(
    platform: PlatformName,
    location: Location = Depends(get_location),
    service: ListingService = Depends(get_listing_service),
):
    try:
        success = await service.publish_to_platform(location, platform)
    except UnsupportedPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"platform": platform.value, "attempted": success is not None, "success": bool(success)}


@router.get("/listings/stats", response_model=ListingStats)
async def listing_stats(
    tenant_id: int,
    location_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    service: ListingService = Depends(get_listing_service),
):
    location = None
    if location_id is not None:
        location = await get_location(tenant_id, location_id, db)
    return await service.get_stats(tenant_id, location)
