from typing import Any, Dict, List, Optional

from app.core.enums import PlatformName
from app.core.utils import parse_timestamp
from app.integrations.base import PlatformAdapter
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.schemas.metadata import YouTubeCommentMetadata
from app.schemas.normalized import NormalizedReview
from app.services.google.auth import GoogleAuthManager
from app.services.youtube.client import YouTubeClient


class YouTubeAdapter(PlatformAdapter):
    """Top-level comments across the location's channel, stored unrated."""

    platform = PlatformName.YOUTUBE

    def __init__(self, db, settings=None, transport=None):
        super().__init__(db, settings, transport)
        self.client = YouTubeClient(self.settings, transport=transport)
        self.auth = GoogleAuthManager(self.settings, transport=transport)

    async def _fetch_reviews(self, location: Location, credential: PlatformCredential, account_id: Optional[str]) -> List[Dict[str, Any]]:
        token = await self.auth.get_access_token(credential)
        return await self.client.list_comment_threads(account_id, token)

    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        thread_snippet = raw.get("snippet") or {}
        top_level = thread_snippet.get("topLevelComment") or {}
        comment_id = top_level.get("id")
        if not comment_id:
            return None
        snippet = top_level.get("snippet") or {}

        metadata = YouTubeCommentMetadata(
            comment_id=comment_id,
            thread_id=raw.get("id"),
            video_id=snippet.get("videoId") or thread_snippet.get("videoId"),
            channel_id=thread_snippet.get("channelId"),
            like_count=snippet.get("likeCount"),
        )
        return NormalizedReview(
            external_id=comment_id,
            author_name=snippet.get("authorDisplayName") or "YouTube User",
            author_image=snippet.get("authorProfileImageUrl"),
            rating=0,
            content=snippet.get("textOriginal") or snippet.get("textDisplay"),
            published_at=parse_timestamp(snippet.get("publishedAt")),
            metadata=metadata.to_bag(),
        )

    async def _post_reply(self, review: Review, target: str, content: str, credential: PlatformCredential) -> None:
        token = await self.auth.get_access_token(credential)
        await self.client.reply_to_comment(target, content, token)
