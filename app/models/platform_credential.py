# app/models/platform_credential.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.utils import as_utc
from app.database import Base


class PlatformCredential(Base):
    """
    Stored authorization for one platform on behalf of one tenant.

    Modern rows carry ``external_id`` (e.g. a Facebook Page id) so a tenant can
    link several accounts of the same platform. Legacy rows have
    ``external_id = NULL`` and are only reachable through the tenant-wide
    fallback. Rows are deactivated on disconnect, never deleted.
    """
    __tablename__ = "platform_credentials"
    __table_args__ = (
        UniqueConstraint("tenant_id", "platform", "external_id", name="uq_platform_credentials_tenant_platform_external"),
        Index("ix_platform_credentials_platform_active", "platform", "is_active"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String, nullable=False)
    external_id = Column(String, nullable=True)

    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text)
    token_type = Column(String, default="Bearer")
    expires_at = Column(DateTime(timezone=True))
    scopes = Column(JSON)
    meta = Column("metadata", JSON, default=dict)  # page_id, page_access_token, account_id, ...
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    tenant = relationship("Tenant", back_populates="credentials")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if not self.expires_at:
            return False
        now = now or datetime.now(timezone.utc)
        return as_utc(self.expires_at) <= now

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return bool(self.is_active) and not self.is_expired(now)

    @property
    def page_id(self) -> Optional[str]:
        return (self.meta or {}).get("page_id") or self.external_id

    @property
    def account_id(self) -> Optional[str]:
        return (self.meta or {}).get("account_id")

    @property
    def page_access_token(self) -> str:
        """Page-scoped token when stored, else the user token."""
        return (self.meta or {}).get("page_access_token") or self.access_token

    def __repr__(self):
        return (f"<PlatformCredential(id={self.id}, tenant_id={self.tenant_id}, platform='{self.platform}', "
                f"external_id={self.external_id!r}, active={self.is_active})>")
