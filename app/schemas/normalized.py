"""
Platform-neutral shapes the adapters map remote payloads into.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ExternalReply(BaseModel):
    """A reply written on the platform itself (e.g. a Play Console developer comment)."""
    content: str
    published_at: Optional[datetime] = None


class NormalizedReview(BaseModel):
    external_id: str
    author_name: Optional[str] = None
    author_image: Optional[str] = None
    rating: int = 0
    content: Optional[str] = None
    published_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    external_reply: Optional[ExternalReply] = None

    def review_values(self) -> Dict[str, Any]:
        """Mutable columns overwritten on every re-sync."""
        return {
            "author_name": self.author_name,
            "author_image": self.author_image,
            "rating": self.rating,
            "content": self.content,
            "published_at": self.published_at,
            "meta": self.metadata,
        }


class NormalizedListing(BaseModel):
    external_id: Optional[str] = None
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
    attributes: Dict[str, Any] = Field(default_factory=dict)

    def listing_values(self) -> Dict[str, Any]:
        values = self.model_dump(exclude={"external_id"})
        if self.external_id:
            values["external_id"] = self.external_id
        return values
