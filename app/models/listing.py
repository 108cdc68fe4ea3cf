# app/models/listing.py
"""
Listing model: the last-known mirror of a location's profile on one platform.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Numeric, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.enums import ListingStatus
from app.database import Base


class Listing(Base):
    __tablename__ = "listings"
    __table_args__ = (
        UniqueConstraint("location_id", "platform", name="uq_listings_location_platform"),
        Index("ix_listings_platform_status", "platform", "status"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String, nullable=False)
    external_id = Column(String, index=True)  # Platform's id for this profile
    status = Column(String, default=ListingStatus.PENDING.value, nullable=False)

    # Normalized profile fields
    name = Column(String)
    address = Column(String)
    city = Column(String)
    state = Column(String)
    postal_code = Column(String)
    country = Column(String)
    phone = Column(String)
    website = Column(String)
    categories = Column(JSON)
    business_hours = Column(JSON)
    description = Column(Text)
    photos = Column(JSON)
    latitude = Column(Numeric(10, 8))
    longitude = Column(Numeric(11, 8))

    attributes = Column(JSON, default=dict)  # platform-specific extras
    discrepancies = Column(JSON, default=dict)  # field -> {"local", "platform"}

    last_synced_at = Column(DateTime(timezone=True))
    last_published_at = Column(DateTime(timezone=True))
    error_message = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    location = relationship("Location", back_populates="listings")

    @property
    def has_discrepancies(self) -> bool:
        return bool(self.discrepancies)

    def is_synced(self) -> bool:
        return self.status == ListingStatus.SYNCED.value

    def has_error(self) -> bool:
        return self.status == ListingStatus.ERROR.value

    def mark_as_synced(self) -> None:
        self.status = ListingStatus.SYNCED.value
        self.last_synced_at = datetime.now(timezone.utc)
        self.error_message = None

    def mark_as_published(self) -> None:
        self.status = ListingStatus.SYNCED.value
        self.last_published_at = datetime.now(timezone.utc)
        self.error_message = None

    def mark_as_error(self, message: str) -> None:
        self.status = ListingStatus.ERROR.value
        self.error_message = message

    def set_discrepancies(self, discrepancies: Dict[str, Dict[str, Any]]) -> None:
        self.discrepancies = dict(discrepancies)

    def __repr__(self):
        return f"<Listing(id={self.id}, location_id={self.location_id}, platform='{self.platform}', status='{self.status}')>"
