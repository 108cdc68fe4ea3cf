# app/core/config.py

import os
from functools import lru_cache
from typing import Annotated, List
from pydantic import ConfigDict, BeforeValidator
from pydantic_settings import BaseSettings, NoDecode


def _parse_csv_list(value):
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


DEFAULT_FACEBOOK_PERMISSIONS = [
    "pages_show_list",
    "pages_read_engagement",
    "pages_manage_metadata",
    "pages_manage_posts",
    "pages_manage_engagement",  # needed to reply to reviews
    "business_management",
]


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Outbound HTTP (every remote call is bounded and never retried)
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Facebook / Instagram Graph API
    FACEBOOK_APP_SECRET: str = ""  # signs Graph calls with appsecret_proof when set
    FACEBOOK_GRAPH_VERSION: str = "v24.0"
    FACEBOOK_BASE_URL: str = "https://graph.facebook.com"
    FACEBOOK_DEFAULT_PERMISSIONS: Annotated[List[str], NoDecode, BeforeValidator(lambda v: _parse_csv_list(v))] = DEFAULT_FACEBOOK_PERMISSIONS
    FACEBOOK_RATINGS_LIMIT: int = 100
    INSTAGRAM_MEDIA_LIMIT: int = 20

    # Google OAuth (refresh-token exchange)
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"

    # Google Places (fallback review source, API key auth)
    GOOGLE_PLACES_API_KEY: str = ""
    GOOGLE_PLACES_BASE_URL: str = "https://maps.googleapis.com/maps/api/place"

    # Google Play Developer API
    GOOGLE_PLAY_BASE_URL: str = "https://androidpublisher.googleapis.com/androidpublisher/v3"
    GOOGLE_PLAY_MAX_PAGES: int = 5

    # Google Business Profile
    GOOGLE_MY_BUSINESS_BASE_URL: str = "https://mybusiness.googleapis.com/v4"
    GOOGLE_BUSINESS_INFORMATION_BASE_URL: str = "https://mybusinessbusinessinformation.googleapis.com/v1"

    # YouTube Data API
    YOUTUBE_BASE_URL: str = "https://www.googleapis.com/youtube/v3"
    YOUTUBE_MAX_RESULTS: int = 100

    # Credential policy: refuse ambiguous tenant-wide fallbacks when True
    STRICT_CREDENTIAL_BINDING: bool = False

    # Stats
    RECENT_SYNC_WINDOW_HOURS: int = 24

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists(os.environ.get('ENV_FILE', '.env')) else None,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
