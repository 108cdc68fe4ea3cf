# app/models/review.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Review(Base):
    """
    A normalized customer review/comment ingested from a platform.

    Identity is (location_id, platform, external_id); re-syncs update the
    mutable fields in place. ``meta`` keeps the platform fields later actions
    need, such as the id a reply must be posted against.
    """
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("location_id", "platform", "external_id", name="uq_reviews_location_platform_external"),
        Index("ix_reviews_platform_rating", "platform", "rating"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String, nullable=False)
    external_id = Column(String, nullable=False)

    author_name = Column(String)
    author_image = Column(String)
    rating = Column(Integer, nullable=False, default=0)  # 0 for unrated sources
    content = Column(Text)
    published_at = Column(DateTime(timezone=True))
    meta = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    location = relationship("Location", back_populates="reviews")
    response = relationship("ReviewResponse", back_populates="review", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return (f"<Review(id={self.id}, location_id={self.location_id}, platform='{self.platform}', "
                f"external_id='{self.external_id}', rating={self.rating})>")
