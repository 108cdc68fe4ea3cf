import logging
from typing import Optional

import httpx

from app.core.config import get_settings
from app.core.exceptions import GoogleAuthError

logger = logging.getLogger(__name__)


class GoogleAuthManager:
    """
    Exchanges a stored Google refresh token for a short-lived access token.

    The refreshed token belongs to the operation that asked for it: it is not
    written back to the credential row and not cached on the manager, so
    concurrently running operations each refresh on their own.
    """

    def __init__(self, settings=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport

    async def refresh_access_token(self, refresh_token: str) -> str:
        if not refresh_token:
            raise GoogleAuthError("No refresh token available", platform="google")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
        }

        try:
            async with httpx.AsyncClient(timeout=self.settings.HTTP_TIMEOUT_SECONDS, transport=self.transport) as client:
                response = await client.post(self.settings.GOOGLE_TOKEN_URL, data=data)
        except httpx.RequestError as e:
            logger.error(f"Network error refreshing Google token: {str(e)}")
            raise GoogleAuthError(f"Network error refreshing access token: {str(e)}", platform="google")

        if response.status_code != 200:
            logger.error(f"Google token refresh failed ({response.status_code}): {response.text[:300]}")
            raise GoogleAuthError(
                f"Failed to refresh access token: {response.text[:300]}",
                status_code=response.status_code,
                platform="google",
            )

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Google token endpoint returned a non-JSON body: {response.text[:300]}")
            raise GoogleAuthError("Invalid JSON from token endpoint", status_code=response.status_code, platform="google")
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise GoogleAuthError("Token endpoint returned no access_token", platform="google")
        logger.debug("Refreshed Google access token")
        return token

    async def get_access_token(self, credential) -> str:
        """
        Token to use for ``credential`` in the current operation.

        Credentials reach here through the resolver, which has already refused
        expired rows, so a recorded expiry means the stored token is still
        good. Rows with no recorded expiry are refreshed when they carry a
        refresh token.
        """
        if credential.expires_at is None and credential.refresh_token:
            return await self.refresh_access_token(credential.refresh_token)
        return credential.access_token
