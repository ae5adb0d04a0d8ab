"""
HTTP client for the Pica API.

Wraps a single httpx.AsyncClient and owns the header conventions shared by
every call: JSON content type, the ``x-pica-secret`` credential and the
caller's global headers.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import RemoteError

logger = logging.getLogger(__name__)

SECRET_HEADER = "x-pica-secret"
CONNECTION_KEY_HEADER = "x-pica-connection-key"
ACTION_ID_HEADER = "x-pica-action-id"
CONTENT_TYPE_HEADER = "Content-Type"


class PicaApiClient:
    """
    Client for the Pica REST API.

    Provides:
    - JSON GETs for discovery endpoints, failing with RemoteError
    - Raw request sending for the passthrough call
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.base_url = settings.server_url
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def base_headers(self) -> Dict[str, str]:
        """Headers sent with every discovery call."""
        return {
            CONTENT_TYPE_HEADER: "application/json",
            SECRET_HEADER: self.settings.secret_key,
            **self.settings.headers,
        }

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a discovery endpoint and decode its JSON body.

        Raises:
            RemoteError: On transport errors and non-2xx responses
        """
        client = await self._get_client()
        try:
            response = await client.get(self.url(path), params=params, headers=self.base_headers())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Pica API error on {path}: {e.response.status_code}")
            raise RemoteError(
                f"Pica API returned {e.response.status_code} for {path}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Pica API request to {path} failed: {type(e).__name__}")
            raise RemoteError(f"Request to {path} failed: {e}") from e

    async def build_request(self, method: str, url: str, **kwargs) -> httpx.Request:
        client = await self._get_client()
        return client.build_request(method, url, **kwargs)

    async def send(self, request: httpx.Request) -> httpx.Response:
        client = await self._get_client()
        return await client.send(request)
