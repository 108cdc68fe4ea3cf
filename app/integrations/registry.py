from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.integrations.base import PlatformAdapter
from app.integrations.platforms import (
    FacebookAdapter,
    InstagramAdapter,
    GoogleMyBusinessAdapter,
    GooglePlacesAdapter,
    GooglePlayAdapter,
    YouTubeAdapter,
)

# Order matters: a fallback adapter must come after the platform it stands in for
ADAPTER_CLASSES = (
    FacebookAdapter,
    InstagramAdapter,
    GoogleMyBusinessAdapter,
    GooglePlacesAdapter,
    GooglePlayAdapter,
    YouTubeAdapter,
)


def build_adapter_registry(db: AsyncSession, settings=None, transport=None) -> Dict[str, PlatformAdapter]:
    """Lookup table of adapters keyed by platform id."""
    settings = settings or get_settings()
    registry: Dict[str, PlatformAdapter] = {}
    for adapter_class in ADAPTER_CLASSES:
        adapter = adapter_class(db, settings=settings, transport=transport)
        registry[adapter.key] = adapter
    return registry
