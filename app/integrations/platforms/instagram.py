import asyncio
import logging
from typing import Any, Dict, List, Optional

from app.core.enums import PlatformName
from app.core.exceptions import PlatformAPIError
from app.core.utils import parse_timestamp
from app.integrations.base import PlatformAdapter
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.schemas.metadata import InstagramCommentMetadata
from app.schemas.normalized import NormalizedReview
from app.services.facebook.client import FacebookGraphClient

logger = logging.getLogger(__name__)


class InstagramAdapter(PlatformAdapter):
    """
    Comments on the recent media of the Instagram business account linked to
    the location's Facebook Page. Authorized by the Page's Facebook credential.
    """

    platform = PlatformName.INSTAGRAM

    def __init__(self, db, settings=None, transport=None):
        super().__init__(db, settings, transport)
        self.client = FacebookGraphClient(self.settings, transport=transport)

    async def _fetch_reviews(self, location: Location, credential: PlatformCredential, account_id: Optional[str]) -> List[Dict[str, Any]]:
        token = credential.page_access_token
        ig_account_id = await self.client.get_instagram_account_id(account_id, token)
        if not ig_account_id:
            logger.info(f"Facebook page {account_id} has no Instagram business account (location {location.id})")
            return []

        media_items = await self.client.get_instagram_media(ig_account_id, token)
        # Skip media Graph reports as having no comments
        commented = [media for media in media_items if media.get("id") and media.get("comments_count", 1)]
        comment_lists = await asyncio.gather(
            *(self.client.get_media_comments(media["id"], token) for media in commented),
            return_exceptions=True,
        )

        raws: List[Dict[str, Any]] = []
        for media, comments in zip(commented, comment_lists):
            if isinstance(comments, PlatformAPIError):
                logger.warning(
                    f"Skipping comments for Instagram media {media['id']} (location {location.id}, "
                    f"status={comments.status_code}): {str(comments)}"
                )
                continue
            if isinstance(comments, BaseException):
                raise comments
            for comment in comments:
                raws.append({"comment": comment, "media": media})
        return raws

    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        comment = raw.get("comment") or {}
        media = raw.get("media") or {}
        comment_id = comment.get("id")
        if not comment_id:
            return None

        metadata = InstagramCommentMetadata(
            comment_id=comment_id,
            media_id=media.get("id"),
            media_type=media.get("media_type"),
            media_url=media.get("media_url"),
            permalink=media.get("permalink"),
        )
        return NormalizedReview(
            external_id=comment_id,
            author_name=comment.get("username") or "Instagram User",
            rating=0,
            content=comment.get("text"),
            published_at=parse_timestamp(comment.get("timestamp")),
            metadata=metadata.to_bag(),
        )

    async def _post_reply(self, review: Review, target: str, content: str, credential: PlatformCredential) -> None:
        await self.client.reply_to_comment(target, content, credential.page_access_token)
