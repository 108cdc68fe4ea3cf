from .facebook import FacebookAdapter
from .instagram import InstagramAdapter
from .google_my_business import GoogleMyBusinessAdapter
from .google_places import GooglePlacesAdapter
from .google_play import GooglePlayAdapter
from .youtube import YouTubeAdapter

__all__ = [
    'FacebookAdapter',
    'InstagramAdapter',
    'GoogleMyBusinessAdapter',
    'GooglePlacesAdapter',
    'GooglePlayAdapter',
    'YouTubeAdapter',
]
