from typing import Any, Dict, List

from app.core.enums import PlatformName
from app.core.exceptions import PlatformAPIError
from app.services.base_client import BaseAPIClient


class GooglePlacesClient(BaseAPIClient):
    """Places Details API; API-key auth, returns at most the five reviews Google selects."""

    platform = PlatformName.GOOGLE.value

    async def get_place_reviews(self, place_id: str) -> List[Dict[str, Any]]:
        url = f"{self.settings.GOOGLE_PLACES_BASE_URL}/details/json"
        response = await self._make_request(
            "GET",
            url,
            params={"place_id": place_id, "fields": "reviews", "key": self.settings.GOOGLE_PLACES_API_KEY},
        )
        status = response.get("status")
        if status and status not in ("OK", "ZERO_RESULTS"):
            raise PlatformAPIError(f"Places API returned status {status}", platform=self.platform)
        return (response.get("result") or {}).get("reviews") or []
