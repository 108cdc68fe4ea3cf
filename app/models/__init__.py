from .tenant import Tenant
from .location import Location
from .platform_credential import PlatformCredential
from .listing import Listing
from .review import Review
from .review_response import ReviewResponse

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'Tenant',
    'Location',
    'PlatformCredential',
    'Listing',
    'Review',
    'ReviewResponse',
]
