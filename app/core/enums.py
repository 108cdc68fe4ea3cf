"""
Shared enums and constants used across the application.
"""

from enum import Enum


class PlatformName(str, Enum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    GOOGLE = "google"  # Places API fallback
    GOOGLE_MY_BUSINESS = "google_my_business"
    GOOGLE_PLAY = "google_play"
    YOUTUBE = "youtube"

    @property
    def credential_platform(self) -> "PlatformName":
        """Platform whose stored credential authorizes calls for this one."""
        if self is PlatformName.INSTAGRAM:
            return PlatformName.FACEBOOK
        return self

    @property
    def is_google_family(self) -> bool:
        return self in (
            PlatformName.GOOGLE_MY_BUSINESS,
            PlatformName.GOOGLE_PLAY,
            PlatformName.YOUTUBE,
        )


class ListingStatus(str, Enum):
    """Listing status values used in both models and schemas"""
    PENDING = "pending"
    ACTIVE = "active"
    SYNCED = "synced"
    ERROR = "error"


class ResponseStatus(str, Enum):
    """ReviewResponse workflow states"""
    DRAFT = "draft"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"


class PublishFailureReason(str, Enum):
    NO_CREDENTIAL = "no_credential"
    EXPIRED_CREDENTIAL = "expired_credential"
    AMBIGUOUS_CREDENTIAL = "ambiguous_credential"
    MISSING_REPLY_TARGET = "missing_reply_target"
    REMOTE_REJECTED = "remote_rejected"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
