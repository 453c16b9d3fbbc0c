"""Single in-flight nearby query with supersession."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from courtscout.api import NearbyVenuesClient
from courtscout.errors import DiscoveryError, FetchSuperseded, NetworkError
from courtscout.models import GeoPoint, NearbyCenter, NearbyQuery, VenueRecord

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Records returned for one generation of the nearby query."""

    generation: int
    center: GeoPoint
    radius_miles: float
    venues: list[VenueRecord] = field(default_factory=list)
    api_center: Optional[NearbyCenter] = None


class FetchController:
    """Keeps exactly one nearby query current.

    Starting a fetch cancels the previous in-flight one. Cancellation is
    cooperative: if a superseded request still completes (or fails), its
    outcome is reported as FetchSuperseded and must not be committed.
    No debouncing happens here; callers rate-limit radius changes.
    """

    def __init__(self, client: NearbyVenuesClient):
        self.client = client
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def cancel(self) -> None:
        """Abandon the in-flight fetch, if any."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            logger.debug(f"[FetchController] Cancelling in-flight fetch #{self._generation - 1}")
            self._task.cancel()
        self._task = None

    async def fetch_nearby(self, center: GeoPoint, radius_miles: float) -> FetchResult:
        """Fetch venues around a center, superseding any earlier fetch.

        Args:
            center: Query center
            radius_miles: Search radius in miles

        Returns:
            FetchResult for this generation

        Raises:
            FetchSuperseded: When a newer fetch (or cancel) replaced this one
            NetworkError, InvalidResponseError, RequestTimeoutError: On failure
        """
        self.cancel()
        generation = self._generation

        query = NearbyQuery(lat=center.latitude, lng=center.longitude, radius=radius_miles)
        task = asyncio.create_task(self.client.fetch_nearby(query))
        self._task = task
        logger.debug(f"[FetchController] Started fetch #{generation} around {center}")

        try:
            result = await task
        except asyncio.CancelledError:
            if not self.is_current(generation):
                raise FetchSuperseded(generation) from None
            # The awaiting coroutine itself was cancelled
            task.cancel()
            raise
        except DiscoveryError as e:
            if not self.is_current(generation):
                raise FetchSuperseded(generation) from e
            raise
        except Exception as e:
            if not self.is_current(generation):
                raise FetchSuperseded(generation) from e
            logger.error(f"[FetchController] Unexpected failure in fetch #{generation}: {e}")
            raise NetworkError(f"Nearby search failed: {e}", cause=e) from e
        finally:
            if self._task is task:
                self._task = None

        if not self.is_current(generation):
            logger.debug(f"[FetchController] Discarding late response of fetch #{generation}")
            raise FetchSuperseded(generation)

        return FetchResult(
            generation=generation,
            center=center,
            radius_miles=radius_miles,
            venues=result.venues,
            api_center=result.center,
        )
