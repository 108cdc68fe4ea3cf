import logging
from typing import Any, Dict, List

from app.core.enums import PlatformName
from app.services.base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class YouTubeClient(BaseAPIClient):
    """
    YouTube Data API v3: comment threads across a channel and replies to them.

    Documentation: https://developers.google.com/youtube/v3/docs/commentThreads
    """

    platform = PlatformName.YOUTUBE.value

    def _headers(self, access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    async def list_comment_threads(self, channel_id: str, access_token: str) -> List[Dict[str, Any]]:
        response = await self._make_request(
            "GET",
            f"{self.settings.YOUTUBE_BASE_URL}/commentThreads",
            params={
                "part": "snippet",
                "allThreadsRelatedToChannelId": channel_id,
                "maxResults": self.settings.YOUTUBE_MAX_RESULTS,
                "order": "time",
            },
            headers=self._headers(access_token),
        )
        return response.get("items") or []

    async def reply_to_comment(self, parent_id: str, text: str, access_token: str) -> Dict[str, Any]:
        return await self._make_request(
            "POST",
            f"{self.settings.YOUTUBE_BASE_URL}/comments",
            params={"part": "snippet"},
            json_body={"snippet": {"parentId": parent_id, "textOriginal": text}},
            headers=self._headers(access_token),
        )
