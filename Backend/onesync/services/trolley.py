from typing import Any, Dict, List, Optional
import httpx
import logging

from onesync.core.config import settings
from onesync.core.exceptions import IntegrationNotConfigured, UpstreamError, ValidationFailed
from onesync.services.pica import decode_json

logger = logging.getLogger(__name__)


class TrolleyService:
    """Payout recipients and batches on Trolley, authenticated with HTTP Basic (key:secret)."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.TROLLEY_BASE_URL.rstrip("/")
        self.api_key = settings.TROLLEY_API_KEY
        self.api_secret = settings.TROLLEY_API_SECRET
        self.transport = transport

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if not self.api_key or not self.api_secret:
            logger.error("Trolley API credentials not configured")
            raise IntegrationNotConfigured("Trolley")

        logger.info(f"TrolleyService: {method} {path}")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.api_key, self.api_secret),
                transport=self.transport,
                timeout=30.0,
            ) as client:
                response = await client.request(method, path, json=json)
            response.raise_for_status()

        except httpx.RequestError as e:
            logger.error(f"Request error to Trolley API: {e}")
            raise UpstreamError("Trolley", 503, f"Failed to connect: {e}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Trolley API returned status {e.response.status_code}: {e.response.text}")
            raise UpstreamError("Trolley", e.response.status_code, e.response.text)
        return decode_json("Trolley", response)

    async def create_recipient(self, email: str, first_name: str, last_name: str) -> Any:
        if not email or not first_name or not last_name:
            raise ValidationFailed("Missing required fields: email, firstName, lastName")
        return await self._request("POST", "/recipients", json={
            "type": "individual",
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
        })

    async def get_recipient(self, recipient_id: str) -> Any:
        return await self._request("GET", f"/recipients/{recipient_id}")

    async def create_batch(self, payouts: List[Dict[str, Any]]) -> Any:
        if not payouts:
            raise ValidationFailed("Missing or invalid payouts array")

        formatted = []
        for payout in payouts:
            currency = payout.get("currency") or "USD"
            formatted.append({
                "recipient": {"id": payout["recipientId"]},
                "sourceAmount": str(payout["amount"]),
                "sourceCurrency": currency,
                "memo": payout.get("memo") or f"Batch payout for {payout['amount']} {currency}",
            })
        return await self._request("POST", "/batches", json={"payouts": formatted})

    async def get_batch(self, batch_id: str) -> Any:
        return await self._request("GET", f"/batches/{batch_id}")

    async def get_payout(self, payout_id: str) -> Any:
        return await self._request("GET", f"/payouts/{payout_id}")


# Dependency
async def get_trolley_service() -> TrolleyService:
    return TrolleyService()
