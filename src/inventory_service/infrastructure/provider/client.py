"""HTTP client for the upstream inventory provider."""

from datetime import date
from typing import Any

import httpx
import structlog

from inventory_service.config import Settings
from inventory_service.infrastructure.provider.rate_limiter import MinIntervalRateLimiter

logger = structlog.get_logger()


class InventoryProviderClient:
    """
    Fetches per-date slot inventory for a product from the provider API.

    Every request passes through the shared rate limiter. Failures are
    logged and reported as None so that one bad date never aborts the
    sync of its siblings.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        rate_limiter: MinIntervalRateLimiter,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._rate_limiter = rate_limiter
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, rate_limiter: MinIntervalRateLimiter
    ) -> "InventoryProviderClient":
        return cls(
            base_url=settings.provider_api_base_url,
            api_key=settings.provider_api_key,
            rate_limiter=rate_limiter,
            timeout=settings.provider_api_timeout,
        )

    async def __aenter__(self) -> "InventoryProviderClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, params: dict[str, str]) -> httpx.Response:
        return await self._client.get(
            url, params=params, headers={"x-api-key": self._api_key}
        )

    async def fetch_inventory(
        self, product_id: int, day: date
    ) -> list[dict[str, Any]] | None:
        """
        Fetch the slots offered for a product on one date.

        Args:
            product_id: Provider product identifier
            day: Date to fetch inventory for

        Returns:
            List of raw slot payloads, or None when the provider call failed
        """
        url = f"{self._base_url}/inventory/{product_id}"
        formatted_date = day.isoformat()

        try:
            response = await self._rate_limiter.schedule(
                self._get, url, {"date": formatted_date}
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Provider returned an error status",
                product_id=product_id,
                date=formatted_date,
                status_code=e.response.status_code,
            )
            return None
        except httpx.HTTPError as e:
            logger.error(
                "Error fetching inventory",
                product_id=product_id,
                date=formatted_date,
                error=str(e),
            )
            return None
        except ValueError as e:
            logger.error(
                "Provider returned an undecodable body",
                product_id=product_id,
                date=formatted_date,
                error=str(e),
            )
            return None

        if not isinstance(payload, list):
            logger.warning(
                "Provider returned a non-list body",
                product_id=product_id,
                date=formatted_date,
                body_type=type(payload).__name__,
            )
            return None

        logger.debug(
            "Fetched inventory",
            product_id=product_id,
            date=formatted_date,
            slots=len(payload),
        )
        return payload
