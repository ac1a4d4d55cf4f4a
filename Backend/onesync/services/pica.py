"""
Client for the Pica API aggregator.

Spotify, Apple Music, Stripe and Intercom are all reached through the same
passthrough endpoint; the connection key picks the upstream account and the
action id picks the operation.
"""

from typing import Any, Dict, Optional
import httpx
import logging

from onesync.core.config import settings
from onesync.core.exceptions import IntegrationNotConfigured, UpstreamError

logger = logging.getLogger(__name__)

JSON_CONTENT = "application/json"
FORM_CONTENT = "application/x-www-form-urlencoded"


class PicaClient:
    def __init__(
        self,
        service: str,
        connection_key: Optional[str],
        content_type: str = JSON_CONTENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.service = service
        self.base_url = f"{settings.PICA_BASE_URL.rstrip('/')}/v1/passthrough"
        self.secret = settings.PICA_SECRET_KEY
        self.connection_key = connection_key
        self.content_type = content_type
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.secret and self.connection_key)

    def _headers(self, action_id: str) -> Dict[str, str]:
        if not self.is_configured:
            logger.error(
                f"Missing Pica credentials for {self.service} "
                f"(secret: {bool(self.secret)}, connection key: {bool(self.connection_key)})"
            )
            raise IntegrationNotConfigured(self.service)
        return {
            "Content-Type": self.content_type,
            "x-pica-secret": self.secret,
            "x-pica-connection-key": self.connection_key,
            "x-pica-action-id": action_id,
        }

    async def send(
        self,
        method: str,
        endpoint: str,
        action_id: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Forward one call and hand back the raw response, whatever its status."""
        headers = self._headers(action_id)
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.info(f"{self.service} via Pica: {method} {endpoint}")
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=30.0) as client:
                return await client.request(
                    method, url, headers=headers, params=params, json=json, data=data
                )
        except httpx.RequestError as e:
            logger.error(f"Request error to {self.service} via Pica: {e}")
            raise UpstreamError(self.service, 503, f"Failed to connect: {e}")

    async def request(
        self,
        method: str,
        endpoint: str,
        action_id: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Forward one call and return the decoded JSON body, raising UpstreamError on non-2xx."""
        response = await self.send(method, endpoint, action_id, params=params, json=json, data=data)
        if not response.is_success:
            logger.error(f"{self.service} API error ({response.status_code}): {response.text}")
            raise UpstreamError(self.service, response.status_code, response.text)
        return decode_json(self.service, response)


def decode_json(service: str, response: httpx.Response) -> Any:
    """The JSON body of a successful response. A body that is not JSON counts as an upstream failure."""
    try:
        return response.json()
    except ValueError:
        logger.error(f"{service} returned a non-JSON body ({response.status_code}): {response.text[:200]}")
        raise UpstreamError(service, response.status_code, response.text)


def drop_empty(params: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the query parameters that were actually provided."""
    return {key: value for key, value in params.items() if value not in (None, "")}
