import json
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import get_settings
from app.core.exceptions import PlatformAPIError

logger = logging.getLogger(__name__)

SUCCESS_CODES = (200, 201, 202, 204)


class BaseAPIClient:
    """
    Shared request plumbing for the platform clients.

    Every call is bounded by ``HTTP_TIMEOUT_SECONDS`` and is attempted exactly
    once. Non-2xx responses and transport failures raise ``PlatformAPIError``;
    callers decide what a failure means.

    ``transport`` is handed straight to ``httpx.AsyncClient`` so tests can
    substitute an ``httpx.MockTransport``.
    """

    platform: str = "unknown"

    def __init__(self, settings=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport
        self.timeout = self.settings.HTTP_TIMEOUT_SECONDS

    @staticmethod
    def _mask(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not params:
            return params
        masked = dict(params)
        for key in ("access_token", "appsecret_proof", "key"):
            if key in masked:
                masked[key] = "[REDACTED]"
        return masked

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Make a request to the platform API.

        Returns:
            Dict: decoded JSON body ({} for empty responses)

        Raises:
            PlatformAPIError: on non-2xx status, network error or timeout
        """
        headers = dict(headers or {})
        masked_headers = headers.copy()
        if "Authorization" in masked_headers:
            masked_headers["Authorization"] = "Bearer [REDACTED]"

        logger.debug(f"Making {method} request to {url}")
        logger.debug(f"Headers: {masked_headers}")
        if params:
            logger.debug(f"Params: {self._mask(params)}")
        if json_body:
            logger.debug(f"Data: {json.dumps(json_body)[:500]}")

        try:
            async with httpx.AsyncClient(timeout=timeout or self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_body,
                    data=data,
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            logger.error(f"{self.platform} request timed out: {method} {url}")
            raise PlatformAPIError(f"Request timed out: {str(e)}", platform=self.platform)
        except httpx.RequestError as e:
            logger.error(f"{self.platform} network error: {str(e)}")
            raise PlatformAPIError(f"Network error: {str(e)}", platform=self.platform)

        if response.status_code not in SUCCESS_CODES:
            logger.error(f"{self.platform} API error {response.status_code} on {method} {url}: {response.text[:500]}")
            raise PlatformAPIError(
                f"Request failed ({response.status_code}): {response.text[:500]}",
                status_code=response.status_code,
                platform=self.platform,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            body = response.json()
        except ValueError:
            raise PlatformAPIError(
                f"Invalid JSON response from {self.platform}",
                status_code=response.status_code,
                platform=self.platform,
            )
        return body if isinstance(body, dict) else {"data": body}
