"""
Marketplace Backend Client

HTTP client the gateway uses to reach the marketplace backend API.
"""

import logging
from typing import Any, List, Optional, Tuple

import httpx

from core.config import ServiceConfig
from core.service_client_base import BaseServiceClient

logger = logging.getLogger(__name__)


class BackendClient(BaseServiceClient):
    """Client for the marketplace backend REST API"""

    service_name = "marketplace_backend"
    default_port = 3001

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ServiceConfig.from_env()
        self.root_url = self.config.backend_url.rstrip("/")
        super().__init__(
            base_url=self.config.backend_api_url,
            timeout=self.config.backend_timeout,
            transport=transport,
        )

    async def forward(
        self,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Optional[Any] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
        bearer_token: Optional[str] = None,
    ) -> httpx.Response:
        """Send one proxied request under the API prefix"""
        logger.debug(f"Proxying {method} {path} (auth={'yes' if bearer_token else 'no'})")
        headers = {"Content-Type": content_type} if content is not None and content_type else None
        return await self.request(
            method,
            path,
            params=params or None,
            json=json,
            content=content,
            bearer_token=bearer_token,
            headers=headers,
        )

    async def ping(self) -> httpx.Response:
        """GET the backend root; raises httpx.HTTPError when unreachable"""
        return await self.client.get(f"{self.root_url}/")


__all__ = ["BackendClient"]
