from typing import Any, Dict

from app.models.listing import Listing
from app.models.location import Location

DISCREPANCY_FIELDS = ("name", "phone", "website", "address", "city", "state", "postal_code")


def _comparable(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def detect_discrepancies(location: Location, listing: Listing) -> Dict[str, Dict[str, Any]]:
    """
    Field-level diff between local location data and a synced listing.

    Values are compared trimmed and case-insensitively. A field that is empty
    on either side is not a discrepancy.
    """
    discrepancies: Dict[str, Dict[str, Any]] = {}
    for field in DISCREPANCY_FIELDS:
        local_value = getattr(location, field, None)
        platform_value = getattr(listing, field, None)
        local, remote = _comparable(local_value), _comparable(platform_value)
        if local and remote and local != remote:
            discrepancies[field] = {"local": local_value, "platform": platform_value}
    return discrepancies
