import logging
from typing import Any

import httpx

LOGGER = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """The review API could not deliver a usable batch."""


class HostawayClient:
    _REVIEWS_PATH = "/v1/reviews"

    def __init__(
        self,
        base_url: str,
        account_id: str,
        api_key: str,
        *,
        page_limit: int = 100,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.account_id = account_id
        self.api_key = api_key
        self.page_limit = page_limit
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.account_id and self.api_key)

    async def fetch_reviews(self, listing_name: str | None = None) -> list[dict[str, Any]]:
        if not self.configured:
            raise UpstreamError("Hostaway credentials are not configured.")

        params = {
            "accountId": self.account_id,
            "status": "published",
            "limit": str(self.page_limit),
        }
        if listing_name:
            params["listingName"] = listing_name

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            ) as client:
                response = await client.get(self._REVIEWS_PATH, params=params)
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"Hostaway request timed out after {self.timeout_seconds}s.") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Hostaway request failed: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(f"Hostaway API error: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Hostaway returned a body that is not JSON.") from exc

        return self.extract_result(payload, source="Hostaway API", require_success=True)

    @staticmethod
    def extract_result(payload: object, *, source: str, require_success: bool = False) -> list[dict[str, Any]]:
        if not isinstance(payload, dict):
            raise UpstreamError(f"{source} payload is not a JSON object.")

        status = payload.get("status")
        if (require_success or status is not None) and status != "success":
            raise UpstreamError(f"{source} returned status {status!r}: {payload.get('message', '')}".strip())

        result = payload.get("result")
        if result is None:
            return []
        if not isinstance(result, list):
            raise UpstreamError(f"{source} 'result' is not a list.")

        records = [item for item in result if isinstance(item, dict)]
        if len(records) < len(result):
            LOGGER.warning("%s: dropped %s non-object records", source, len(result) - len(records))
        return records
