"""
Typed metadata bags stored on ``Review.meta``.

The identifiers later actions depend on (the id a reply is posted against)
are named, validated fields; anything else the platform sends is kept as
passthrough extras so unanticipated fields survive a round trip.
"""
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, ValidationError

from app.core.enums import PlatformName


class PlatformMetadata(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def reply_target_id(self) -> Optional[str]:
        return None

    @classmethod
    def parse(cls, raw: Optional[Dict[str, Any]]):
        """Validate a stored bag; an unusable bag parses as empty."""
        try:
            return cls.model_validate(raw or {})
        except ValidationError:
            return cls()

    def to_bag(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class OpenGraphStory(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None


class FacebookReviewMetadata(PlatformMetadata):
    """Raw Graph API rating; replies go to ``/{open_graph_story.id}/comments``."""
    open_graph_story: Optional[OpenGraphStory] = None

    @property
    def reply_target_id(self) -> Optional[str]:
        return self.open_graph_story.id if self.open_graph_story else None


class InstagramCommentMetadata(PlatformMetadata):
    comment_id: Optional[str] = None
    media_id: Optional[str] = None
    media_type: Optional[str] = None
    media_url: Optional[str] = None
    permalink: Optional[str] = None

    @property
    def reply_target_id(self) -> Optional[str]:
        return self.comment_id


class GooglePlayReviewMetadata(PlatformMetadata):
    review_id: Optional[str] = None
    package_name: Optional[str] = None
    android_os_version: Optional[int] = None
    app_version_code: Optional[int] = None
    app_version_name: Optional[str] = None
    device: Optional[str] = None
    reviewer_language: Optional[str] = None

    @property
    def reply_target_id(self) -> Optional[str]:
        return self.review_id


class GoogleMyBusinessReviewMetadata(PlatformMetadata):
    """``review_name`` is the full resource name, e.g. accounts/1/locations/2/reviews/3."""
    review_name: Optional[str] = None
    review_id: Optional[str] = None

    @property
    def reply_target_id(self) -> Optional[str]:
        return self.review_name


class GooglePlacesReviewMetadata(PlatformMetadata):
    author_url: Optional[str] = None
    language: Optional[str] = None
    relative_time_description: Optional[str] = None


class YouTubeCommentMetadata(PlatformMetadata):
    comment_id: Optional[str] = None
    thread_id: Optional[str] = None
    video_id: Optional[str] = None
    channel_id: Optional[str] = None
    like_count: Optional[int] = None

    @property
    def reply_target_id(self) -> Optional[str]:
        return self.comment_id


_METADATA_MODELS: Dict[PlatformName, Type[PlatformMetadata]] = {
    PlatformName.FACEBOOK: FacebookReviewMetadata,
    PlatformName.INSTAGRAM: InstagramCommentMetadata,
    PlatformName.GOOGLE_PLAY: GooglePlayReviewMetadata,
    PlatformName.GOOGLE_MY_BUSINESS: GoogleMyBusinessReviewMetadata,
    PlatformName.GOOGLE: GooglePlacesReviewMetadata,
    PlatformName.YOUTUBE: YouTubeCommentMetadata,
}


def metadata_model_for(platform) -> Type[PlatformMetadata]:
    return _METADATA_MODELS.get(PlatformName(platform), PlatformMetadata)
