import logging
from typing import Any, Dict, List

from app.core.enums import PlatformName
from app.services.base_client import BaseAPIClient

logger = logging.getLogger(__name__)

LOCATION_READ_MASK = "name,title,phoneNumbers,categories,storefrontAddress,websiteUri,regularHours,latlng,profile"


class GoogleMyBusinessClient(BaseAPIClient):
    """
    Google Business Profile client.

    Reviews still live on the My Business v4 API; location profile data moved
    to the Business Information v1 API. Resource names are passed through as
    Google returns them (``accounts/{a}/locations/{l}``).
    """

    platform = PlatformName.GOOGLE_MY_BUSINESS.value

    def _headers(self, access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    async def list_reviews(self, location_name: str, access_token: str, max_pages: int = 5) -> List[Dict[str, Any]]:
        url = f"{self.settings.GOOGLE_MY_BUSINESS_BASE_URL}/{location_name.strip('/')}/reviews"
        reviews: List[Dict[str, Any]] = []
        params: Dict[str, Any] = {"pageSize": 50}

        for _ in range(max_pages):
            response = await self._make_request("GET", url, params=params, headers=self._headers(access_token))
            reviews.extend(response.get("reviews") or [])
            next_token = response.get("nextPageToken")
            if not next_token:
                break
            params = {"pageSize": 50, "pageToken": next_token}

        return reviews

    async def reply_to_review(self, review_name: str, comment: str, access_token: str) -> Dict[str, Any]:
        url = f"{self.settings.GOOGLE_MY_BUSINESS_BASE_URL}/{review_name.strip('/')}/reply"
        return await self._make_request("PUT", url, json_body={"comment": comment}, headers=self._headers(access_token))

    @staticmethod
    def location_id(location_name: str) -> str:
        """``accounts/1/locations/2`` -> ``locations/2`` (Business Information addresses locations directly)."""
        marker = location_name.find("locations/")
        return location_name[marker:] if marker >= 0 else f"locations/{location_name}"

    async def get_location(self, location_name: str, access_token: str) -> Dict[str, Any]:
        url = f"{self.settings.GOOGLE_BUSINESS_INFORMATION_BASE_URL}/{self.location_id(location_name)}"
        return await self._make_request(
            "GET", url, params={"readMask": LOCATION_READ_MASK}, headers=self._headers(access_token)
        )

    async def update_location(self, location_name: str, body: Dict[str, Any], access_token: str) -> Dict[str, Any]:
        url = f"{self.settings.GOOGLE_BUSINESS_INFORMATION_BASE_URL}/{self.location_id(location_name)}"
        update_mask = ",".join(sorted(body))
        logger.info(f"Patching Google Business location {location_name} ({update_mask})")
        return await self._make_request(
            "PATCH", url, params={"updateMask": update_mask}, json_body=body, headers=self._headers(access_token)
        )
