import hashlib
import hmac
import json
import logging
from typing import Any, Dict, List, Optional

from app.core.enums import PlatformName
from app.services.base_client import BaseAPIClient

logger = logging.getLogger(__name__)

RATING_FIELDS = "rating,review_text,recommendation_type,created_time,open_graph_story,reviewer{name,picture}"
MEDIA_FIELDS = "id,caption,media_type,media_url,permalink,comments_count,timestamp"
COMMENT_FIELDS = "id,text,username,timestamp"
PAGE_FIELDS = (
    "id,name,about,description,phone,website,emails,location,hours,category_list,link,"
    "fan_count,followers_count,rating_count,overall_star_rating,verification_status"
)

# Page fields that can be written back through POST /{page-id}
WRITABLE_PAGE_FIELDS = ("about", "description", "phone", "website", "hours")


class FacebookGraphClient(BaseAPIClient):
    """
    Async client for the Facebook Graph API, covering Page ratings, Page
    details and the Instagram business account attached to a Page.

    Every call takes the token to use explicitly; the client holds no
    credential so one instance can serve several Pages.

    Documentation: https://developers.facebook.com/docs/graph-api
    """

    platform = PlatformName.FACEBOOK.value

    def _url(self, endpoint: str) -> str:
        return f"{self.settings.FACEBOOK_BASE_URL}/{self.settings.FACEBOOK_GRAPH_VERSION}/{endpoint.lstrip('/')}"

    def _auth_params(self, access_token: str) -> Dict[str, str]:
        params = {"access_token": access_token}
        secret = self.settings.FACEBOOK_APP_SECRET
        if secret:
            params["appsecret_proof"] = hmac.new(secret.encode(), access_token.encode(), hashlib.sha256).hexdigest()
        return params

    async def get(self, endpoint: str, access_token: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        query = dict(params or {})
        query.update(self._auth_params(access_token))
        return await self._make_request("GET", self._url(endpoint), params=query)

    async def post(self, endpoint: str, access_token: str, data: Optional[Dict] = None) -> Dict[str, Any]:
        form = dict(data or {})
        form.update(self._auth_params(access_token))
        return await self._make_request("POST", self._url(endpoint), data=form)

    # Page ratings

    async def get_page_ratings(self, page_id: str, access_token: str) -> List[Dict[str, Any]]:
        response = await self.get(
            f"{page_id}/ratings",
            access_token,
            params={"fields": RATING_FIELDS, "limit": self.settings.FACEBOOK_RATINGS_LIMIT},
        )
        return response.get("data") or []

    async def reply_to_story(self, story_id: str, message: str, access_token: str) -> Dict[str, Any]:
        return await self.post(f"{story_id}/comments", access_token, data={"message": message})

    # Instagram (through the Page's linked business account)

    async def get_instagram_account_id(self, page_id: str, access_token: str) -> Optional[str]:
        response = await self.get(page_id, access_token, params={"fields": "instagram_business_account"})
        account = response.get("instagram_business_account") or {}
        return account.get("id")

    async def get_instagram_media(self, ig_account_id: str, access_token: str) -> List[Dict[str, Any]]:
        response = await self.get(
            f"{ig_account_id}/media",
            access_token,
            params={"fields": MEDIA_FIELDS, "limit": self.settings.INSTAGRAM_MEDIA_LIMIT},
        )
        return response.get("data") or []

    async def get_media_comments(self, media_id: str, access_token: str) -> List[Dict[str, Any]]:
        response = await self.get(f"{media_id}/comments", access_token, params={"fields": COMMENT_FIELDS})
        return response.get("data") or []

    async def reply_to_comment(self, comment_id: str, message: str, access_token: str) -> Dict[str, Any]:
        return await self.post(f"{comment_id}/replies", access_token, data={"message": message})

    # Page details

    async def get_page_details(self, page_id: str, access_token: str) -> Dict[str, Any]:
        return await self.get(page_id, access_token, params={"fields": PAGE_FIELDS})

    async def update_page(self, page_id: str, fields: Dict[str, Any], access_token: str) -> Dict[str, Any]:
        payload = {key: value for key, value in fields.items() if key in WRITABLE_PAGE_FIELDS and value not in (None, "")}
        if "hours" in payload and isinstance(payload["hours"], dict):
            payload["hours"] = json.dumps(payload["hours"])
        logger.info(f"Updating Facebook page {page_id} fields: {sorted(payload)}")
        return await self.post(page_id, access_token, data=payload)
