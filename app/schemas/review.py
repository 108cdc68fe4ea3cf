from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel

from app.schemas.base import TimestampedSchema


class ReviewResponseRead(TimestampedSchema):
    id: int
    review_id: int
    user_id: Optional[int] = None
    content: str
    status: str
    ai_generated: bool = False
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    published_at: Optional[datetime] = None
    platform_synced: bool = False


class PlatformReviewStats(BaseModel):
    count: int
    average_rating: float


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]
    by_platform: Dict[str, PlatformReviewStats]
