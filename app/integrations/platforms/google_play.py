import logging
from typing import Any, Dict, List, Optional

from app.core.enums import PlatformName
from app.core.utils import parse_timestamp
from app.integrations.base import PlatformAdapter
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.schemas.metadata import GooglePlayReviewMetadata
from app.schemas.normalized import ExternalReply, NormalizedReview
from app.services.google.auth import GoogleAuthManager
from app.services.google.play_client import GooglePlayClient

logger = logging.getLogger(__name__)


def _find_comment(comments: List[Dict[str, Any]], kind: str) -> Optional[Dict[str, Any]]:
    for comment in comments or []:
        if comment.get(kind):
            return comment[kind]
    return None


def _seconds(stamp: Optional[Dict[str, Any]]):
    return parse_timestamp((stamp or {}).get("seconds"))


class GooglePlayAdapter(PlatformAdapter):
    """App reviews for the location's Android package."""

    platform = PlatformName.GOOGLE_PLAY

    def __init__(self, db, settings=None, transport=None):
        super().__init__(db, settings, transport)
        self.client = GooglePlayClient(self.settings, transport=transport)
        self.auth = GoogleAuthManager(self.settings, transport=transport)

    async def _fetch_reviews(self, location: Location, credential: PlatformCredential, account_id: Optional[str]) -> List[Dict[str, Any]]:
        token = await self.auth.get_access_token(credential)
        return await self.client.list_reviews(account_id, token)

    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        review_id = raw.get("reviewId")
        user_comment = _find_comment(raw.get("comments"), "userComment")
        if not review_id or user_comment is None:
            return None

        metadata = GooglePlayReviewMetadata(
            review_id=review_id,
            package_name=location.google_play_package_name,
            android_os_version=user_comment.get("androidOsVersion"),
            app_version_code=user_comment.get("appVersionCode"),
            app_version_name=user_comment.get("appVersionName"),
            device=user_comment.get("device"),
            reviewer_language=user_comment.get("reviewerLanguage"),
        )

        reply = None
        developer_comment = _find_comment(raw.get("comments"), "developerComment")
        if developer_comment and developer_comment.get("text"):
            reply = ExternalReply(
                content=developer_comment["text"],
                published_at=_seconds(developer_comment.get("lastModified")),
            )

        return NormalizedReview(
            external_id=review_id,
            author_name=raw.get("authorName"),
            rating=int(user_comment.get("starRating") or 0),
            content=(user_comment.get("text") or "").strip() or None,
            published_at=_seconds(user_comment.get("lastModified")),
            metadata=metadata.to_bag(),
            external_reply=reply,
        )

    async def _post_reply(self, review: Review, target: str, content: str, credential: PlatformCredential) -> None:
        package_name = GooglePlayReviewMetadata.parse(review.meta).package_name
        if not package_name:
            package_name = await self._package_name_for(review)
        token = await self.auth.get_access_token(credential)
        await self.client.reply_to_review(package_name, target, content, token)

    async def _package_name_for(self, review: Review) -> Optional[str]:
        location = await self.db.get(Location, review.location_id)
        return location.google_play_package_name if location else None
