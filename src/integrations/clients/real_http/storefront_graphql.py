"""
Storefront GraphQL transport.

The ONLY place that posts GraphQL documents to the storefront endpoint.
Catalog and cart clients build their queries and hand them to `execute`.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

from src.integrations.policy.response_wrappers import IntegrationResponseError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"


class StorefrontGraphQLClient:
    def __init__(
        self,
        api_url: Optional[str] = None,
        access_token: Optional[str] = None,
        token_header: str = DEFAULT_TOKEN_HEADER,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = (api_url or os.getenv("STOREFRONT_API_URL", "")).rstrip("/")
        self.access_token = access_token if access_token is not None else os.getenv("STOREFRONT_ACCESS_TOKEN", "")
        self.token_header = token_header
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_url:
            raise ValueError("STOREFRONT_API_URL is not configured.")

        headers: Dict[str, str] = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.access_token:
            headers[self.token_header] = self.access_token

        payload = {"query": query, "variables": variables or {}}
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
            try:
                data = response.json() if response.content else {}
            except ValueError as exc:
                raise IntegrationResponseError("Storefront returned a non-JSON body.") from exc

        logger.debug("GraphQL call to %s returned keys=%s", self.api_url, list(data.keys()) if isinstance(data, dict) else None)
        return data
