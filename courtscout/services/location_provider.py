"""Location providers that supply the query center."""
import asyncio
import logging
from typing import Optional

from courtscout.errors import LocationPermissionDenied, RequestTimeoutError
from courtscout.models import GeoPoint

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_TIMEOUT_SECONDS = 8.0


class LocationProvider:
    """Source of the user's current position."""

    async def current_location(self) -> GeoPoint:
        """Return the current position.

        Raises:
            LocationPermissionDenied: When the user refused location access
        """
        raise NotImplementedError


class StaticLocationProvider(LocationProvider):
    """Provider with a fixed answer; a None point means permission denied."""

    def __init__(self, point: Optional[GeoPoint] = None):
        self.point = point

    async def current_location(self) -> GeoPoint:
        if self.point is None:
            raise LocationPermissionDenied("Allow location so we can show courts near you.")
        return self.point


async def resolve_location(
    provider: LocationProvider,
    timeout: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
) -> GeoPoint:
    """Ask a provider for the current position, giving up after timeout seconds.

    Raises:
        LocationPermissionDenied: Propagated from the provider
        RequestTimeoutError: When the provider is too slow
    """
    try:
        point = await asyncio.wait_for(provider.current_location(), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"[LocationProvider] No position after {timeout}s")
        raise RequestTimeoutError("Location taking too long", cause=e) from e

    logger.info(f"[LocationProvider] Resolved position {point}")
    return point
