from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.schemas.base import TimestampedSchema


class ListingRead(TimestampedSchema):
    id: int
    location_id: int
    platform: str
    external_id: Optional[str] = None
    status: str
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    categories: Optional[List[Any]] = None
    business_hours: Optional[Any] = None
    description: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    attributes: Optional[Dict[str, Any]] = None
    discrepancies: Optional[Dict[str, Any]] = None
    has_discrepancies: bool = False
    last_synced_at: Optional[datetime] = None
    last_published_at: Optional[datetime] = None
    error_message: Optional[str] = None


class ListingStats(BaseModel):
    total_listings: int
    by_platform: Dict[str, int]
    by_status: Dict[str, int]
    with_discrepancies: int
    recently_synced: int
