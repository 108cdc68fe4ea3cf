import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from app.core.enums import PlatformName
from app.core.utils import parse_timestamp
from app.integrations.base import PlatformAdapter
from app.models.listing import Listing
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.models.review import Review
from app.schemas.metadata import GoogleMyBusinessReviewMetadata
from app.schemas.normalized import ExternalReply, NormalizedListing, NormalizedReview
from app.services.google.auth import GoogleAuthManager
from app.services.google.my_business_client import GoogleMyBusinessClient

logger = logging.getLogger(__name__)

STAR_RATINGS = {"ONE": 1, "TWO": 2, "THREE": 3, "FOUR": 4, "FIVE": 5}


class GoogleMyBusinessAdapter(PlatformAdapter):
    """
    Google Business Profile reviews and location data.

    The remote location is addressed by the resource name stored on the
    location's Listing (``accounts/{a}/locations/{l}``); a bare
    ``locations/{l}`` is completed with the credential's account id.
    """

    platform = PlatformName.GOOGLE_MY_BUSINESS
    supports_listing = True

    def __init__(self, db, settings=None, transport=None):
        super().__init__(db, settings, transport)
        self.client = GoogleMyBusinessClient(self.settings, transport=transport)
        self.auth = GoogleAuthManager(self.settings, transport=transport)

    @staticmethod
    def resource_name(external_id: Optional[str], credential: Optional[PlatformCredential]) -> Optional[str]:
        if not external_id:
            return None
        external_id = external_id.strip("/")
        if external_id.startswith("accounts/"):
            return external_id
        account_id = credential.account_id if credential is not None else None
        if not account_id:
            return None
        if not account_id.startswith("accounts/"):
            account_id = f"accounts/{account_id}"
        if not external_id.startswith("locations/"):
            external_id = f"locations/{external_id}"
        return f"{account_id}/{external_id}"

    def is_linked(self, location: Location) -> bool:
        # Bound through the location's Listing, checked in resolve_account
        return True

    async def resolve_account(self, location: Location, credential: Optional[PlatformCredential]) -> Optional[str]:
        stmt = select(Listing.external_id).where(
            Listing.location_id == location.id,
            Listing.platform == self.key,
        )
        external_id = (await self.db.execute(stmt)).scalar_one_or_none()
        name = self.resource_name(external_id, credential)
        if name is None:
            logger.info(f"No Google Business location bound for location {location.id}")
        return name

    async def _fetch_reviews(self, location: Location, credential: PlatformCredential, account_id: Optional[str]) -> List[Dict[str, Any]]:
        if not account_id or not account_id.startswith("accounts/"):
            return []
        token = await self.auth.get_access_token(credential)
        return await self.client.list_reviews(account_id, token)

    def normalize_review(self, raw: Dict[str, Any], location: Location) -> Optional[NormalizedReview]:
        rating = STAR_RATINGS.get(raw.get("starRating") or "")
        review_name = raw.get("name")
        if rating is None or not review_name:
            logger.debug(f"Skipping Google review {review_name!r} with star rating {raw.get('starRating')!r}")
            return None

        reviewer = raw.get("reviewer") or {}
        review_id = raw.get("reviewId") or review_name.rsplit("/", 1)[-1]

        reply = None
        review_reply = raw.get("reviewReply") or {}
        if review_reply.get("comment"):
            reply = ExternalReply(
                content=review_reply["comment"],
                published_at=parse_timestamp(review_reply.get("updateTime")),
            )

        return NormalizedReview(
            external_id=review_id,
            author_name=reviewer.get("displayName") or "Anonymous",
            author_image=reviewer.get("profilePhotoUrl"),
            rating=rating,
            content=raw.get("comment"),
            published_at=parse_timestamp(raw.get("createTime")),
            metadata=GoogleMyBusinessReviewMetadata(review_name=review_name, review_id=review_id).to_bag(),
            external_reply=reply,
        )

    async def _post_reply(self, review: Review, target: str, content: str, credential: PlatformCredential) -> None:
        token = await self.auth.get_access_token(credential)
        await self.client.reply_to_review(target, content, token)

    # Listings

    def listing_external_id(self, location, listing, credential) -> Optional[str]:
        return self.resource_name(listing.external_id if listing is not None else None, credential)

    async def _fetch_listing(self, credential: PlatformCredential, external_id: str) -> Dict[str, Any]:
        token = await self.auth.get_access_token(credential)
        return await self.client.get_location(external_id, token)

    def normalize_listing(self, raw: Dict[str, Any]) -> NormalizedListing:
        address = raw.get("storefrontAddress") or {}
        lines = address.get("addressLines") or []
        phones = raw.get("phoneNumbers") or {}
        categories = raw.get("categories") or {}
        primary = (categories.get("primaryCategory") or {}).get("displayName")
        additional = [c.get("displayName") for c in categories.get("additionalCategories") or [] if c.get("displayName")]
        latlng = raw.get("latlng") or {}

        return NormalizedListing(
            external_id=raw.get("name"),
            name=raw.get("title"),
            address=lines[0] if lines else None,
            city=address.get("locality"),
            state=address.get("administrativeArea"),
            postal_code=address.get("postalCode"),
            country=address.get("regionCode"),
            phone=phones.get("primaryPhone"),
            website=raw.get("websiteUri"),
            categories=[c for c in [primary, *additional] if c] or None,
            business_hours=raw.get("regularHours"),
            description=(raw.get("profile") or {}).get("description"),
            latitude=latlng.get("latitude"),
            longitude=latlng.get("longitude"),
            attributes={"address_lines": lines} if len(lines) > 1 else {},
        )

    async def _push_listing(self, location: Location, credential: PlatformCredential, external_id: str) -> None:
        body: Dict[str, Any] = {}
        if location.name:
            body["title"] = location.name
        if location.phone:
            body["phoneNumbers"] = {"primaryPhone": location.phone}
        if location.website:
            body["websiteUri"] = location.website
        if location.address:
            address = {
                "addressLines": [line for line in (location.address, location.address2) if line],
                "locality": location.city,
                "administrativeArea": location.state,
                "postalCode": location.postal_code,
                "regionCode": location.country,
            }
            body["storefrontAddress"] = {key: value for key, value in address.items() if value}
        token = await self.auth.get_access_token(credential)
        await self.client.update_location(external_id, body, token)
