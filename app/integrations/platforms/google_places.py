from typing import Any, Dict, List, Optional

from app.core.enums import PlatformName
from app.core.utils import best_effort_id, parse_timestamp
from app.integrations.base import PlatformAdapter
from app.models.location import Location
from app.schemas.metadata import GooglePlacesReviewMetadata
from app.schemas.normalized import NormalizedReview
from app.services.google.places_client import GooglePlacesClient


class GooglePlacesAdapter(PlatformAdapter):
    """
    Read-only Google reviews through the Places API key.

    Only consulted when no Google My Business credential resolves for the
    location. Places exposes no review id, so identity is a hash of author and
    time; replies can only be tracked locally.
    """

    platform = PlatformName.GOOGLE
    supports_reply = False
    requires_credential = False
    fallback_for = PlatformName.GOOGLE_MY_BUSINESS

    def __init__(self, db, settings=None, transport=None):
        super().__init__(db, settings, transport)
        self.client = GooglePlacesClient(self.settings, transport=transport)

    def is_linked(self, location: Location) -> bool:
        return bool(location.google_place_id and self.settings.GOOGLE_PLACES_API_KEY)

    async def _fetch_reviews(self, location: Location, credential, account_id: Optional[str]) -> List[Dict[str, Any]]:
        return await self.client.get_place_reviews(account_id)

    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        rating = raw.get("rating")
        if rating is None:
            return None

        author = raw.get("author_name")
        time = raw.get("time")
        metadata = GooglePlacesReviewMetadata(
            author_url=raw.get("author_url"),
            language=raw.get("language"),
            relative_time_description=raw.get("relative_time_description"),
        )
        return NormalizedReview(
            external_id=best_effort_id(author, time),
            author_name=author or "Anonymous",
            author_image=raw.get("profile_photo_url"),
            rating=int(rating),
            content=raw.get("text"),
            published_at=parse_timestamp(time),
            metadata=metadata.to_bag(),
        )
