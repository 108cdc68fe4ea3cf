"""
Selects the credential a location's platform call must use.

Facebook and Instagram locations bound to a Page only ever use that Page's
credential. Other platforms fall back in this order: a row bound to the
location's linking value, the only active row, a legacy unbound row, and
finally the lowest-id row (or an error when STRICT_CREDENTIAL_BINDING is set).
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.enums import PlatformName
from app.core.exceptions import (
    AmbiguousCredentialError,
    CredentialExpiredError,
    CredentialNotFoundError,
)
from app.models.location import Location
from app.models.platform_credential import PlatformCredential
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class CredentialResolver:
    def __init__(self, db: AsyncSession, settings=None, store: Optional[CredentialStore] = None):
        self.settings = settings or get_settings()
        self.store = store or CredentialStore(db, self.settings)

    async def resolve(self, location: Location, platform) -> PlatformCredential:
        """
        Raises:
            CredentialNotFoundError: no active credential applies
            CredentialExpiredError: the applicable credential is past its expiry
            AmbiguousCredentialError: several could apply and strict binding is on
        """
        platform = PlatformName(platform)
        credential_platform = platform.credential_platform

        if credential_platform is PlatformName.FACEBOOK and location.facebook_page_id:
            credential = await self._resolve_page(location, location.facebook_page_id)
        else:
            credential = await self._resolve_generic(
                location, credential_platform, location.linking_value(credential_platform)
            )

        if credential is None:
            raise CredentialNotFoundError(
                f"No active {credential_platform.value} credential for location {location.id}",
                platform=platform.value,
            )
        if not credential.is_valid():
            raise CredentialExpiredError(
                f"{credential_platform.value} credential {credential.id} has expired",
                platform=platform.value,
            )
        return credential

    async def _resolve_page(self, location: Location, page_id: str) -> Optional[PlatformCredential]:
        credential = await self.store.find_bound(location.tenant_id, PlatformName.FACEBOOK, page_id)
        if credential is not None:
            return credential

        # Legacy rows predate external_id and name their page in metadata
        for candidate in await self.store.list_active(location.tenant_id, PlatformName.FACEBOOK):
            if candidate.external_id is None and (candidate.meta or {}).get("page_id") == page_id:
                return candidate
        return None

    async def _resolve_generic(
        self,
        location: Location,
        platform: PlatformName,
        linking_value: Optional[str],
    ) -> Optional[PlatformCredential]:
        candidates: List[PlatformCredential] = await self.store.list_active(location.tenant_id, platform)
        if not candidates:
            return None

        if linking_value:
            for candidate in candidates:
                if candidate.external_id == linking_value:
                    return candidate

        if len(candidates) == 1:
            return candidates[0]

        legacy = [candidate for candidate in candidates if candidate.external_id is None]
        if len(legacy) == 1:
            return legacy[0]

        ids = [candidate.id for candidate in candidates]
        if self.settings.STRICT_CREDENTIAL_BINDING:
            raise AmbiguousCredentialError(
                f"{len(candidates)} active {platform.value} credentials {ids} could apply to location {location.id}",
                platform=platform.value,
            )
        logger.warning(
            f"Ambiguous {platform.value} credentials {ids} for location {location.id}; using {ids[0]}"
        )
        return candidates[0]
