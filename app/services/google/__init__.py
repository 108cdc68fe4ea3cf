from .auth import GoogleAuthManager
from .play_client import GooglePlayClient
from .my_business_client import GoogleMyBusinessClient
from .places_client import GooglePlacesClient

__all__ = [
    'GoogleAuthManager',
    'GooglePlayClient',
    'GoogleMyBusinessClient',
    'GooglePlacesClient',
]
