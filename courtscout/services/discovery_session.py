"""Discovery session: orchestrates fetch, annotation, ranking and culling."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from courtscout.errors import DiscoveryError, FetchSuperseded, SessionClosedError
from courtscout.metrics import (
    PIPELINE_RANKED_VENUES,
    PIPELINE_RENDER_TRUNCATIONS_TOTAL,
    SESSION_FETCHED_VENUES,
    SESSION_FETCH_RESULTS_TOTAL,
)
from courtscout.models import (
    AnnotatedVenue,
    DEFAULT_FILTERS,
    FilterCriteria,
    GeoPoint,
    SortKey,
    Viewport,
)
from courtscout.models.viewport import NEAR_ME_DELTA, ZOOMED_OUT_DELTA_DEGREES
from courtscout.services.filter_rank import apply as filter_and_rank
from courtscout.services.fetch_controller import FetchController, FetchResult
from courtscout.services.location_provider import (
    DEFAULT_LOCATION_TIMEOUT_SECONDS,
    LocationProvider,
    resolve_location,
)
from courtscout.services.schedule_evaluator import ScheduleEvaluator
from courtscout.services.viewport_culler import (
    CLOSE_RENDER_CAP,
    DEFAULT_RENDER_CAP,
    RenderSet,
    WIDE_RENDER_CAP,
    cull,
)

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = 25.0
MIN_RADIUS_MILES = 5.0
MAX_RADIUS_MILES = 200.0
RADIUS_STEP_MILES = 5.0


class SessionStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    ERROR = "error"


@dataclass
class SessionView:
    """Snapshot of everything the presentation layer needs."""

    status: SessionStatus
    render_set: RenderSet
    ranked: list[AnnotatedVenue] = field(default_factory=list)
    error: Optional[DiscoveryError] = None
    center: Optional[GeoPoint] = None
    radius_miles: float = DEFAULT_RADIUS_MILES
    filters: FilterCriteria = DEFAULT_FILTERS
    sort_key: SortKey = SortKey.DISTANCE
    viewport: Optional[Viewport] = None
    has_data: bool = False  # A fetch has been committed at some point

    @property
    def ranked_count(self) -> int:
        return len(self.ranked)

    @property
    def stale(self) -> bool:
        """True when a refresh failed and last-good data is being shown."""
        return self.error is not None and self.has_data


class DiscoverySession:
    """Owns center, radius, filters, sort key, viewport and fetched venues.

    Only set_center, set_radius and refresh hit the network. Filter, sort and
    viewport changes re-run the pure pipelines over already-fetched data.
    A failed fetch moves the session to ERROR but keeps the last-good ranked
    set on display (view.stale); the next successful fetch returns to READY.
    No method raises except SessionClosedError after close().
    """

    def __init__(
        self,
        fetch_controller: FetchController,
        evaluator: ScheduleEvaluator,
        radius_miles: float = DEFAULT_RADIUS_MILES,
        min_radius_miles: float = MIN_RADIUS_MILES,
        max_radius_miles: float = MAX_RADIUS_MILES,
        radius_step_miles: float = RADIUS_STEP_MILES,
        wide_render_cap: int = WIDE_RENDER_CAP,
        close_render_cap: int = CLOSE_RENDER_CAP,
        default_render_cap: int = DEFAULT_RENDER_CAP,
        zoomed_out_delta: float = ZOOMED_OUT_DELTA_DEGREES,
        near_me_delta: float = NEAR_ME_DELTA,
        location_timeout: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
        recenter_on_fetch: bool = False,
    ):
        self.fetch_controller = fetch_controller
        self.evaluator = evaluator
        self.min_radius_miles = min_radius_miles
        self.max_radius_miles = max_radius_miles
        self.radius_step_miles = radius_step_miles
        self.wide_render_cap = wide_render_cap
        self.close_render_cap = close_render_cap
        self.default_render_cap = default_render_cap
        self.zoomed_out_delta = zoomed_out_delta
        self.near_me_delta = near_me_delta
        self.location_timeout = location_timeout
        self.recenter_on_fetch = recenter_on_fetch

        self._status = SessionStatus.IDLE
        self._center: Optional[GeoPoint] = None
        self._radius_miles = self._clamp_radius(radius_miles)
        self._filters = DEFAULT_FILTERS
        self._sort_key = SortKey.DISTANCE
        self._viewport: Optional[Viewport] = None
        self._records: list[AnnotatedVenue] = []
        self._ranked: list[AnnotatedVenue] = []
        self._render_set = RenderSet(cap=default_render_cap)
        self._error: Optional[DiscoveryError] = None
        self._has_data = False
        self._annotated_at: Optional[datetime] = None
        self._closed = False

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def center(self) -> Optional[GeoPoint]:
        return self._center

    @property
    def radius_miles(self) -> float:
        return self._radius_miles

    @property
    def filters(self) -> FilterCriteria:
        return self._filters

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def viewport(self) -> Optional[Viewport]:
        return self._viewport

    @property
    def records(self) -> list[AnnotatedVenue]:
        """All venues of the last committed fetch, unfiltered."""
        return list(self._records)

    @property
    def ranked(self) -> list[AnnotatedVenue]:
        return list(self._ranked)

    @property
    def render_set(self) -> RenderSet:
        return self._render_set

    @property
    def error(self) -> Optional[DiscoveryError]:
        return self._error

    @property
    def annotated_at(self) -> Optional[datetime]:
        """Instant open_now flags were last derived."""
        return self._annotated_at

    @property
    def closed(self) -> bool:
        return self._closed

    def view(self) -> SessionView:
        return SessionView(
            status=self._status,
            render_set=self._render_set,
            ranked=list(self._ranked),
            error=self._error,
            center=self._center,
            radius_miles=self._radius_miles,
            filters=self._filters,
            sort_key=self._sort_key,
            viewport=self._viewport,
            has_data=self._has_data,
        )

    # ------------------------------------------------------------------
    # Operations that fetch
    # ------------------------------------------------------------------

    async def set_center(self, point: GeoPoint) -> SessionView:
        """Move the query center and fetch around it."""
        self._ensure_open()
        self._center = point
        return await self._fetch()

    async def set_radius(self, radius_miles: float) -> SessionView:
        """Change the search radius (clamped) and refetch if a center is known.

        Callers debounce rapid radius changes; no debouncing happens here.
        """
        self._ensure_open()
        radius = self._clamp_radius(radius_miles)
        if radius == self._radius_miles and self._has_data:
            return self.view()
        self._radius_miles = radius
        if self._center is None:
            return self.view()
        return await self._fetch()

    async def adjust_radius(self, steps: int = 1) -> SessionView:
        """Grow (positive) or shrink (negative) the radius by whole steps."""
        return await self.set_radius(self._radius_miles + steps * self.radius_step_miles)

    async def refresh(self) -> SessionView:
        """Refetch around the current center."""
        self._ensure_open()
        if self._center is None:
            return self.view()
        return await self._fetch()

    async def resolve_center(self, provider: LocationProvider) -> SessionView:
        """Center the session on the provider's position and fetch.

        Permission denial and timeouts are recorded on the session; the caller
        may still supply a center manually with set_center.
        """
        self._ensure_open()
        try:
            point = await resolve_location(provider, timeout=self.location_timeout)
        except DiscoveryError as e:
            logger.warning(f"[DiscoverySession] Could not resolve center: {e}")
            self._record_failure(e)
            return self.view()

        self._viewport = Viewport.around(point, self.near_me_delta)
        return await self.set_center(point)

    # ------------------------------------------------------------------
    # Operations that only recompute
    # ------------------------------------------------------------------

    def set_filters(self, criteria: FilterCriteria) -> SessionView:
        self._ensure_open()
        self._filters = criteria
        self._recompute()
        return self.view()

    def set_sort_key(self, sort_key: Union[SortKey, str]) -> SessionView:
        self._ensure_open()
        self._sort_key = SortKey(sort_key)
        self._recompute()
        return self.view()

    def set_viewport(self, viewport: Optional[Viewport]) -> SessionView:
        """Re-cull for a new viewport without re-fetching or re-ranking."""
        self._ensure_open()
        self._viewport = viewport
        self._recull()
        return self.view()

    def refresh_open_status(self, as_of: Optional[datetime] = None) -> SessionView:
        """Re-derive open_now for the current venues.

        open_now is computed once per fetch and drifts as time passes; callers
        refresh it on an interval or when the app resumes.
        """
        self._ensure_open()
        moment = as_of if as_of is not None else self.evaluator.clock.now()
        self._records = self.evaluator.annotate(
            (item.venue for item in self._records), as_of=moment
        )
        self._annotated_at = moment
        self._recompute()
        return self.view()

    def close(self) -> None:
        """Dispose the session, cancelling any in-flight fetch."""
        if self._closed:
            return
        self.fetch_controller.cancel()
        if self._status == SessionStatus.FETCHING:
            # The abandoned fetch will never settle the status itself
            if self._error is not None:
                self._status = SessionStatus.ERROR
            elif self._has_data:
                self._status = SessionStatus.READY
            else:
                self._status = SessionStatus.IDLE
        self._closed = True
        logger.debug("[DiscoverySession] Closed")

    async def __aenter__(self) -> "DiscoverySession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError()

    def _clamp_radius(self, radius_miles: float) -> float:
        return float(min(self.max_radius_miles, max(self.min_radius_miles, radius_miles)))

    async def _fetch(self) -> SessionView:
        center = self._center
        radius = self._radius_miles
        self._status = SessionStatus.FETCHING
        logger.info(f"[DiscoverySession] Fetching around {center}, radius={radius}mi")

        try:
            result = await self.fetch_controller.fetch_nearby(center, radius)
        except FetchSuperseded as e:
            # The newer fetch owns the session state now
            SESSION_FETCH_RESULTS_TOTAL.labels(result="superseded").inc()
            logger.debug(f"[DiscoverySession] {e}")
            return self.view()
        except DiscoveryError as e:
            SESSION_FETCH_RESULTS_TOTAL.labels(result="error").inc()
            logger.warning(f"[DiscoverySession] Fetch failed: {e}")
            self._record_failure(e)
            return self.view()

        self._commit(result)
        return self.view()

    def _record_failure(self, error: DiscoveryError) -> None:
        """Enter ERROR without touching records, ranked set or render set."""
        self._error = error
        self._status = SessionStatus.ERROR

    def _commit(self, result: FetchResult) -> None:
        moment = self.evaluator.clock.now()
        # Whole-set replacement: nothing from the previous fetch is kept
        self._records = self.evaluator.annotate(result.venues, as_of=moment)
        self._annotated_at = moment
        self._has_data = True
        self._error = None
        self._status = SessionStatus.READY

        if self.recenter_on_fetch and result.api_center is not None:
            self._viewport = Viewport.from_zoom(
                result.api_center.lat, result.api_center.lng, result.api_center.zoom
            )

        SESSION_FETCH_RESULTS_TOTAL.labels(result="committed").inc()
        SESSION_FETCHED_VENUES.observe(len(self._records))
        logger.info(
            f"[DiscoverySession] Committed fetch #{result.generation}: "
            f"{len(self._records)} venues"
        )
        self._recompute()

    def _recompute(self) -> None:
        self._ranked = filter_and_rank(self._records, self._filters, self._sort_key)
        PIPELINE_RANKED_VENUES.observe(len(self._ranked))
        self._recull()

    def _recull(self) -> None:
        self._render_set = cull(
            self._ranked,
            self._viewport,
            wide_cap=self.wide_render_cap,
            close_cap=self.close_render_cap,
            default_cap=self.default_render_cap,
            threshold=self.zoomed_out_delta,
        )
        if self._render_set.truncated:
            bucket = self._render_set.zoom_bucket.value if self._render_set.zoom_bucket else "none"
            PIPELINE_RENDER_TRUNCATIONS_TOTAL.labels(zoom_bucket=bucket).inc()
