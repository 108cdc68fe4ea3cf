from typing import AsyncGenerator

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import async_session
from app.models.location import Location
from app.services.listing_service import ListingService
from app.services.review_service import ReviewService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


async def get_listing_service(db: AsyncSession = Depends(get_db)) -> ListingService:
    return ListingService(db)


async def get_location(tenant_id: int, location_id: int, db: AsyncSession = Depends(get_db)) -> Location:
    """Location addressed by the path, scoped to the tenant in the same path."""
    location = await db.get(Location, location_id)
    if location is None or location.tenant_id != tenant_id:
        raise HTTPException(status_code=404, detail=f"Location {location_id} not found for tenant {tenant_id}")
    return location
