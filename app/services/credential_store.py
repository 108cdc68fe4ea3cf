"""
Keyed access to stored platform credentials.

Rows are keyed by (tenant, platform, external_id). Writes go through
``upsert_credential`` so re-connecting an account updates it in place, and
disconnecting only deactivates the row.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.enums import PlatformName
from app.core.utils import upsert
from app.models.platform_credential import PlatformCredential

logger = logging.getLogger(__name__)

REVIEW_SCOPES = ("pages_read_engagement", "pages_manage_engagement")

# Platforms reported by get_available_platforms, in display order
AVAILABLE_PLATFORMS = (
    PlatformName.FACEBOOK,
    PlatformName.GOOGLE_MY_BUSINESS,
    PlatformName.GOOGLE_PLAY,
    PlatformName.YOUTUBE,
)


def _tenant_id(tenant) -> int:
    return tenant if isinstance(tenant, int) else tenant.id


class CredentialStore:
    def __init__(self, db: AsyncSession, settings=None):
        self.db = db
        self.settings = settings or get_settings()

    async def list_active(self, tenant, platform) -> List[PlatformCredential]:
        """Active rows for (tenant, platform), lowest id first."""
        stmt = (
            select(PlatformCredential)
            .where(
                PlatformCredential.tenant_id == _tenant_id(tenant),
                PlatformCredential.platform == PlatformName(platform).value,
                PlatformCredential.is_active.is_(True),
            )
            .order_by(PlatformCredential.id)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_for_tenant(self, tenant, platform) -> Optional[PlatformCredential]:
        """First active credential for the tenant and platform, ignoring account binding."""
        credentials = await self.list_active(tenant, platform)
        return credentials[0] if credentials else None

    async def find_bound(self, tenant, platform, external_id: str) -> Optional[PlatformCredential]:
        """Active credential bound to exactly ``external_id``."""
        stmt = select(PlatformCredential).where(
            PlatformCredential.tenant_id == _tenant_id(tenant),
            PlatformCredential.platform == PlatformName(platform).value,
            PlatformCredential.external_id == external_id,
            PlatformCredential.is_active.is_(True),
        )
        return (await self.db.execute(stmt)).scalars().first()

    async def upsert_credential(
        self,
        tenant,
        platform,
        access_token: str,
        external_id: Optional[str] = None,
        refresh_token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        scopes: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        token_type: str = "Bearer",
    ) -> PlatformCredential:
        platform = PlatformName(platform)
        credential, created = await upsert(
            self.db,
            PlatformCredential,
            {"tenant_id": _tenant_id(tenant), "platform": platform.value, "external_id": external_id},
            {
                "access_token": access_token,
                "refresh_token": refresh_token,
                "token_type": token_type,
                "expires_at": expires_at,
                "scopes": scopes,
                "meta": metadata or {},
                "is_active": True,
            },
        )
        action = "Stored" if created else "Updated"
        logger.info(f"{action} {platform.value} credential {credential.id} for tenant {credential.tenant_id} (external_id={external_id})")
        return credential

    async def store_facebook_page_credentials(
        self,
        tenant,
        access_token: str,
        page_id: str,
        page_access_token: Optional[str] = None,
        scopes: Optional[List[str]] = None,
    ) -> PlatformCredential:
        """One row per Page; storing the same Page again updates it in place."""
        return await self.upsert_credential(
            tenant,
            PlatformName.FACEBOOK,
            access_token,
            external_id=page_id,
            scopes=scopes if scopes is not None else list(self.settings.FACEBOOK_DEFAULT_PERMISSIONS),
            metadata={"page_id": page_id, "page_access_token": page_access_token},
        )

    async def deactivate(self, credential: PlatformCredential) -> PlatformCredential:
        credential.is_active = False
        await self.db.flush()
        logger.info(f"Deactivated {credential.platform} credential {credential.id} for tenant {credential.tenant_id}")
        return credential

    @staticmethod
    def has_review_access(credential: PlatformCredential) -> bool:
        scopes = credential.scopes or []
        return any(scope in scopes for scope in REVIEW_SCOPES)

    async def get_available_platforms(self, tenant) -> Dict[str, Dict[str, Any]]:
        platforms = {
            platform.value: {"connected": False, "page_id": None}
            for platform in AVAILABLE_PLATFORMS
        }
        stmt = (
            select(PlatformCredential)
            .where(
                PlatformCredential.tenant_id == _tenant_id(tenant),
                PlatformCredential.is_active.is_(True),
            )
            .order_by(PlatformCredential.id)
        )
        for credential in (await self.db.execute(stmt)).scalars().all():
            entry = platforms.get(credential.platform)
            # A tenant with several Pages is connected if any of them is usable
            if entry is None or entry["connected"]:
                continue
            entry["connected"] = credential.is_valid()
            entry["page_id"] = credential.page_id
        return platforms
