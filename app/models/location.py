# app/models/location.py
from typing import Optional

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.enums import PlatformName
from app.database import Base


class Location(Base):
    """
    A physical/business entity belonging to one tenant.

    The per-platform linking fields bind the location to its remote
    counterpart; a platform sync needs the matching field (or a usable
    fallback credential) to be present.
    """
    __tablename__ = "locations"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    address = Column(String)
    address2 = Column(String)
    city = Column(String)
    state = Column(String)
    postal_code = Column(String)
    country = Column(String)
    phone = Column(String)
    website = Column(String)
    latitude = Column(Numeric(10, 7))
    longitude = Column(Numeric(10, 7))
    primary_category = Column(String)
    categories = Column(JSON)
    business_hours = Column(JSON)
    status = Column(String, default="active")

    # Platform linking fields
    facebook_page_id = Column(String, index=True)
    google_place_id = Column(String, index=True)
    google_play_package_name = Column(String, index=True)
    youtube_channel_id = Column(String, index=True)

    reviews_synced_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    tenant = relationship("Tenant", back_populates="locations")
    listings = relationship("Listing", back_populates="location", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="location", cascade="all, delete-orphan")

    def linking_value(self, platform) -> Optional[str]:
        """
        The location's binding to ``platform``, or None when unbound.

        Google Business Profile has no field here: its remote location is the
        external_id of the location's Listing.
        """
        platform = PlatformName(platform)
        value = {
            PlatformName.FACEBOOK: self.facebook_page_id,
            PlatformName.INSTAGRAM: self.facebook_page_id,
            PlatformName.GOOGLE: self.google_place_id,
            PlatformName.GOOGLE_PLAY: self.google_play_package_name,
            PlatformName.YOUTUBE: self.youtube_channel_id,
        }.get(platform)
        return value or None

    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self):
        return f"<Location(id={self.id}, tenant_id={self.tenant_id}, name='{self.name}')>"
