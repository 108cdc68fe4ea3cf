# app/models/review_response.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.enums import ResponseStatus
from app.core.exceptions import InvalidResponseStateError
from app.database import Base


class ReviewResponse(Base):
    """
    Reply to a review. Workflow: draft -> approved -> published, with
    rejected reachable from any unpublished state and resubmittable to draft.

    ``platform_synced`` records whether the reply reached the platform, as
    opposed to only being tracked locally. ``user_id`` is NULL for replies
    that were written on the platform itself.
    """
    __tablename__ = "review_responses"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, unique=True)
    user_id = Column(Integer, nullable=True)

    content = Column(Text, nullable=False)
    status = Column(String, default=ResponseStatus.DRAFT.value, nullable=False, index=True)
    ai_generated = Column(Boolean, default=False, nullable=False)
    tone = Column(String)
    language = Column(String)

    approved_by = Column(Integer)
    approved_at = Column(DateTime(timezone=True))
    rejection_reason = Column(Text)
    published_at = Column(DateTime(timezone=True))
    platform_synced = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    review = relationship("Review", back_populates="response")

    def is_draft(self) -> bool:
        return self.status == ResponseStatus.DRAFT.value

    def is_approved(self) -> bool:
        return self.status == ResponseStatus.APPROVED.value

    def is_rejected(self) -> bool:
        return self.status == ResponseStatus.REJECTED.value

    def is_published(self) -> bool:
        return self.status == ResponseStatus.PUBLISHED.value

    def approve(self, user_id: Optional[int]) -> None:
        if not self.is_draft():
            raise InvalidResponseStateError(f"Cannot approve a response in status '{self.status}'")
        self.status = ResponseStatus.APPROVED.value
        self.approved_by = user_id
        self.approved_at = datetime.now(timezone.utc)
        self.rejection_reason = None

    def reject(self, reason: str) -> None:
        if self.is_published():
            raise InvalidResponseStateError("Cannot reject a published response")
        self.status = ResponseStatus.REJECTED.value
        self.rejection_reason = reason

    def resubmit(self, content: Optional[str] = None) -> None:
        if not self.is_rejected():
            raise InvalidResponseStateError(f"Only rejected responses can be resubmitted, not '{self.status}'")
        if content is not None:
            self.content = content
        self.status = ResponseStatus.DRAFT.value

    def publish(self, platform_synced: bool = False) -> None:
        self.status = ResponseStatus.PUBLISHED.value
        self.published_at = datetime.now(timezone.utc)
        self.platform_synced = platform_synced

    def __repr__(self):
        return f"<ReviewResponse(id={self.id}, review_id={self.review_id}, status='{self.status}', synced={self.platform_synced})>"
