"""Nearby-venues API client with async HTTP support."""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from courtscout.errors import InvalidResponseError, NetworkError, RequestTimeoutError
from courtscout.models import NearbyCenter, NearbyQuery, NearbyResponse, VenueRecord
from courtscout.metrics import (
    NEARBY_API_CALLS_TOTAL,
    NEARBY_API_CALL_DURATION_SECONDS,
    NEARBY_API_ERRORS_TOTAL,
    NEARBY_API_RECORDS_SKIPPED_TOTAL,
)

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_PATH = "/api/v1/locations/nearby.php"


@dataclass
class NearbyResult:
    """Validated payload of one nearby call."""

    venues: list[VenueRecord] = field(default_factory=list)
    center: Optional[NearbyCenter] = None
    skipped: int = 0


class NearbyVenuesClient:
    """Async HTTP client for the nearby-venues API."""

    def __init__(
        self,
        base_url: str,
        path: str = DEFAULT_NEARBY_PATH,
        timeout: float = 10.0,
    ):
        """Initialize nearby-venues API client.

        Args:
            base_url: Base URL of the API server (e.g., "https://whatyoudink.com")
            path: Path of the nearby endpoint
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.path = path if path.startswith("/") else f"/{path}"
        self.timeout = timeout

        # Create async HTTP client with connection pooling
        self.client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    async def close(self):
        """Close the HTTP client and clean up resources."""
        await self.client.aclose()

    async def _request(self, params: dict[str, str]) -> Any:
        """GET the nearby endpoint and decode its JSON body.

        Raises:
            NetworkError: On non-2xx status or connection failure
            RequestTimeoutError: When the request times out
            InvalidResponseError: When the body is not JSON
        """
        logger.debug(f"[NearbyVenuesClient] GET {self.url} params={params}")

        start_time = time.perf_counter()

        try:
            response = await self.client.request(
                method="GET",
                url=self.url,
                params=params,
                headers={"Accept": "application/json"},
            )

            logger.debug(f"[NearbyVenuesClient] Response status: {response.status_code}")

            response.raise_for_status()
            response_json = response.json()

            duration = time.perf_counter() - start_time
            NEARBY_API_CALL_DURATION_SECONDS.observe(duration)
            NEARBY_API_CALLS_TOTAL.labels(status="success").inc()

            return response_json

        except httpx.HTTPStatusError as e:
            self._record_error("http_error", start_time)
            message = self._error_message(e.response)
            logger.error(f"[NearbyVenuesClient] HTTP error: {message}")
            raise NetworkError(message, cause=e) from e
        except httpx.TimeoutException as e:
            self._record_error("timeout", start_time)
            logger.error(f"[NearbyVenuesClient] Timeout: {e}")
            raise RequestTimeoutError("Nearby search timed out", cause=e) from e
        except httpx.RequestError as e:
            self._record_error("connection_error", start_time)
            logger.error(f"[NearbyVenuesClient] Request error: {e}")
            raise NetworkError(f"Nearby search failed: {e}", cause=e) from e
        except ValueError as e:
            self._record_error("invalid_response", start_time)
            logger.error(f"[NearbyVenuesClient] Response is not JSON: {e}")
            raise InvalidResponseError("Nearby search returned invalid JSON", cause=e) from e

    def _record_error(self, error_type: str, start_time: float) -> None:
        duration = time.perf_counter() - start_time
        NEARBY_API_CALL_DURATION_SECONDS.observe(duration)
        NEARBY_API_CALLS_TOTAL.labels(status="error").inc()
        NEARBY_API_ERRORS_TOTAL.labels(error_type=error_type).inc()

    @staticmethod
    def _error_message(response: Optional[httpx.Response]) -> str:
        """Prefer the API's own error text, else the status code."""
        if response is None:
            return "Request failed"
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"Request failed ({response.status_code})"

    async def fetch_nearby(self, query: NearbyQuery) -> NearbyResult:
        """Call the nearby endpoint for a center and radius.

        Malformed venue records are skipped and counted; a malformed envelope
        or ok=false fails the whole call.

        Args:
            query: Center and radius in miles

        Returns:
            NearbyResult with validated venues and the API's suggested center

        Raises:
            NetworkError, RequestTimeoutError, InvalidResponseError
        """
        logger.info(
            f"[NearbyVenuesClient] Fetching nearby: lat={query.lat:.6f}, "
            f"lng={query.lng:.6f}, radius={query.radius}mi"
        )

        data = await self._request(query.to_query_params())

        try:
            envelope = NearbyResponse.model_validate(data)
        except ValidationError as e:
            NEARBY_API_ERRORS_TOTAL.labels(error_type="invalid_response").inc()
            logger.error(f"[NearbyVenuesClient] Malformed response envelope: {e}")
            raise InvalidResponseError("Nearby search returned a malformed response", cause=e) from e

        if not envelope.ok:
            NEARBY_API_ERRORS_TOTAL.labels(error_type="not_ok").inc()
            message = envelope.error or "Nearby search failed"
            logger.error(f"[NearbyVenuesClient] API reported failure: {message}")
            raise InvalidResponseError(message)

        venues: list[VenueRecord] = []
        skipped = 0
        for raw in envelope.locations:
            try:
                venues.append(VenueRecord.model_validate(raw))
            except ValidationError as e:
                skipped += 1
                record_id = raw.get("id") if isinstance(raw, dict) else None
                logger.warning(
                    f"[NearbyVenuesClient] Skipping malformed venue id={record_id}: "
                    f"{e.error_count()} validation error(s)"
                )

        if skipped:
            NEARBY_API_RECORDS_SKIPPED_TOTAL.inc(skipped)

        logger.info(
            f"[NearbyVenuesClient] fetch_nearby success: venues={len(venues)}, skipped={skipped}"
        )
        return NearbyResult(venues=venues, center=envelope.center, skipped=skipped)
