import logging
from typing import Any, Dict, List

from app.core.enums import PlatformName
from app.services.base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class GooglePlayClient(BaseAPIClient):
    """
    Android Publisher API (v3) client for app reviews.

    Documentation: https://developers.google.com/android-publisher/api-ref/rest/v3/reviews
    """

    platform = PlatformName.GOOGLE_PLAY.value

    def _headers(self, access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    async def list_reviews(self, package_name: str, access_token: str) -> List[Dict[str, Any]]:
        """All reviews for ``package_name``, following page tokens up to GOOGLE_PLAY_MAX_PAGES."""
        url = f"{self.settings.GOOGLE_PLAY_BASE_URL}/applications/{package_name}/reviews"
        reviews: List[Dict[str, Any]] = []
        params: Dict[str, Any] = {}

        for page in range(self.settings.GOOGLE_PLAY_MAX_PAGES):
            response = await self._make_request("GET", url, params=params or None, headers=self._headers(access_token))
            reviews.extend(response.get("reviews") or [])

            next_token = (response.get("tokenPagination") or {}).get("nextPageToken")
            if not next_token:
                break
            params = {"token": next_token}
        else:
            logger.info(f"Stopped Google Play pagination for {package_name} after {self.settings.GOOGLE_PLAY_MAX_PAGES} pages")

        return reviews

    async def reply_to_review(self, package_name: str, review_id: str, reply_text: str, access_token: str) -> Dict[str, Any]:
        url = f"{self.settings.GOOGLE_PLAY_BASE_URL}/applications/{package_name}/reviews/{review_id}:reply"
        return await self._make_request(
            "POST", url, json_body={"replyText": reply_text}, headers=self._headers(access_token)
        )
