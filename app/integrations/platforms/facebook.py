import logging
from typing import Any, Dict, List, Optional

from app.core.enums import PlatformName
from app.core.utils import best_effort_id, parse_timestamp
from app.integrations.base import PlatformAdapter
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.schemas.metadata import FacebookReviewMetadata
from app.schemas.normalized import NormalizedListing, NormalizedReview
from app.services.facebook.client import FacebookGraphClient

logger = logging.getLogger(__name__)


class FacebookAdapter(PlatformAdapter):
    """Page ratings (reviews/recommendations) and Page profile data."""

    platform = PlatformName.FACEBOOK
    supports_listing = True

    def __init__(self, db, settings=None, transport=None):
        super().__init__(db, settings, transport)
        self.client = FacebookGraphClient(self.settings, transport=transport)

    async def _fetch_reviews(self, location: Location, credential: PlatformCredential, account_id: Optional[str]) -> List[Dict[str, Any]]:
        return await self.client.get_page_ratings(account_id, credential.page_access_token)

    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        rating = raw.get("rating")
        if rating is None:
            # Recommendation-only entries carry no star rating
            return None

        reviewer = raw.get("reviewer") or {}
        author = reviewer.get("name") or "Anonymous"
        picture = ((reviewer.get("picture") or {}).get("data") or {}).get("url")
        created_time = raw.get("created_time")

        metadata = FacebookReviewMetadata.parse(raw)
        external_id = metadata.reply_target_id or best_effort_id(author, created_time)

        return NormalizedReview(
            external_id=external_id,
            author_name=author,
            author_image=picture,
            rating=int(rating),
            content=raw.get("review_text") or raw.get("recommendation_type"),
            published_at=parse_timestamp(created_time),
            metadata=metadata.to_bag(),
        )

    async def _post_reply(self, review: Review, target: str, content: str, credential: PlatformCredential) -> None:
        await self.client.reply_to_story(target, content, credential.page_access_token)

    # Listings

    def listing_external_id(self, location, listing, credential) -> Optional[str]:
        return location.facebook_page_id or (listing.external_id if listing is not None else None) or credential.page_id

    async def _fetch_listing(self, credential: PlatformCredential, external_id: str) -> Dict[str, Any]:
        return await self.client.get_page_details(external_id, credential.page_access_token)

    def normalize_listing(self, raw: Dict[str, Any]) -> NormalizedListing:
        place = raw.get("location") or {}
        categories = [item.get("name") for item in raw.get("category_list") or [] if item.get("name")]
        return NormalizedListing(
            external_id=raw.get("id"),
            name=raw.get("name"),
            address=place.get("street"),
            city=place.get("city"),
            state=place.get("state"),
            postal_code=place.get("zip"),
            country=place.get("country"),
            phone=raw.get("phone"),
            website=raw.get("website"),
            categories=categories or None,
            business_hours=raw.get("hours"),
            description=raw.get("about") or raw.get("description"),
            latitude=place.get("latitude"),
            longitude=place.get("longitude"),
            attributes={
                "fan_count": raw.get("fan_count"),
                "followers_count": raw.get("followers_count"),
                "rating_count": raw.get("rating_count"),
                "overall_star_rating": raw.get("overall_star_rating"),
                "verification_status": raw.get("verification_status"),
                "link": raw.get("link"),
            },
        )

    async def _push_listing(self, location: Location, credential: PlatformCredential, external_id: str) -> None:
        await self.client.update_page(
            external_id,
            {"about": location.name, "phone": location.phone, "website": location.website},
            credential.page_access_token,
        )
