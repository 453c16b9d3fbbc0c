"""Court handler for HTTP requests."""
import logging
from typing import Callable, Optional, Union

from courtscout.handlers.display import (
    access_text,
    active_filters_label,
    clean_phone_digits,
    courts_text,
    format_rating,
    full_address,
    hours_rows,
    normalize_website,
    ordered_skill_levels,
    skill_levels_text,
)
from courtscout.models import (
    AnnotatedVenue,
    CourtDetail,
    CourtSummary,
    FilterCriteria,
    GeoPoint,
    NearbyCourtsResponse,
    SortKey,
    Viewport,
)
from courtscout.services import DiscoverySession, ScheduleEvaluator, SessionView

logger = logging.getLogger(__name__)

# Geographic center of the continental US
DEFAULT_CENTER = GeoPoint(latitude=39.8283, longitude=-98.5795)
DEFAULT_REGION_DELTA = 18.0


class VenueHandler:
    """Handler for court-related HTTP requests."""

    def __init__(
        self,
        session_factory: Callable[[], DiscoverySession],
        evaluator: ScheduleEvaluator,
        default_center: GeoPoint = DEFAULT_CENTER,
        default_region_delta: float = DEFAULT_REGION_DELTA,
    ):
        """Initialize court handler.

        Args:
            session_factory: Builds a fresh DiscoverySession per request
            evaluator: Used to highlight today's hours in verbose responses
            default_center: Query center when the caller sends no location
            default_region_delta: Span of the map region shown around default_center
        """
        self.session_factory = session_factory
        self.evaluator = evaluator
        self.default_center = default_center
        self.default_region_delta = default_region_delta

    async def get_courts_nearby(
        self,
        lat: Optional[float],
        lng: Optional[float],
        radius: float,
        criteria: FilterCriteria,
        sort_key: SortKey = SortKey.DISTANCE,
        viewport: Optional[Viewport] = None,
        verbose: bool = False,
    ) -> NearbyCourtsResponse:
        """Get ranked courts near a location, culled to the viewport.

        Flow:
        1. Configure a fresh session (filters, sort key, viewport, radius)
        2. Set the center, which triggers the single fetch
        3. Transform the session view based on verbose flag

        Args:
            lat: Latitude, or None to search around the default center
            lng: Longitude, or None to search around the default center
            radius: Radius in miles (clamped by the session)
            criteria: Filter constraints
            sort_key: Ranking key inside the verified/unverified groups
            viewport: Visible map region; None returns the first page by rank
            verbose: If True, return CourtDetail entries; else CourtSummary

        Returns:
            NearbyCourtsResponse built from the session view
        """
        if lat is None or lng is None:
            center = self.default_center
            if viewport is None:
                viewport = Viewport.around(center, self.default_region_delta)
        else:
            center = GeoPoint(latitude=lat, longitude=lng)

        logger.info(
            f"[VenueHandler] GetCourtsNearby: center={center}, "
            f"radius={radius:.1f}mi, sort={sort_key.value}, verbose={verbose}"
        )

        session = self.session_factory()
        try:
            session.set_filters(criteria)
            session.set_sort_key(sort_key)
            session.set_viewport(viewport)
            await session.set_radius(radius)
            view = await session.set_center(center)
        finally:
            session.close()

        response = self._transform(view, verbose)
        logger.info(
            f"[VenueHandler] Returning {response.rendered_count}/{response.ranked_count} courts "
            f"(status={response.status})"
        )
        return response

    def ping(self) -> dict[str, str]:
        """Health check endpoint.

        Returns:
            {"status": "pong"}
        """
        logger.debug("[VenueHandler] Ping")
        return {"status": "pong"}

    def _transform(self, view: SessionView, verbose: bool) -> NearbyCourtsResponse:
        courts: Union[list[CourtDetail], list[CourtSummary]]
        if verbose:
            courts = [self._detail(item) for item in view.render_set.venues]
        else:
            courts = [self._summary(item) for item in view.render_set.venues]

        return NearbyCourtsResponse(
            status=view.status.value,
            center=view.center,
            radius_miles=view.radius_miles,
            ranked_count=view.ranked_count,
            rendered_count=len(view.render_set),
            render_cap=view.render_set.cap,
            truncated=view.render_set.truncated,
            zoom_bucket=view.render_set.zoom_bucket.value if view.render_set.zoom_bucket else None,
            filters_label=active_filters_label(view.filters, view.sort_key),
            error=view.error.message if view.error else None,
            stale=view.stale,
            courts=courts,
        )

    def _summary_fields(self, item: AnnotatedVenue) -> dict:
        venue = item.venue
        return dict(
            id=venue.id,
            name=venue.name,
            latitude=venue.latitude,
            longitude=venue.longitude,
            distance_mi=venue.distance_mi,
            verified=venue.visited,
            open_now=item.open_now,
            rating_overall=venue.rating_overall,
            rating_label=format_rating(venue.rating_overall),
            total_courts=item.total_courts,
            courts_text=courts_text(venue.courts),
            access_type=venue.access_type.value,
            access_text=access_text(venue.access_type),
            skill_levels=[level.value for level in ordered_skill_levels(venue.skill_levels)],
            skill_levels_text=skill_levels_text(venue.skill_levels),
            address=full_address(venue),
        )

    def _summary(self, item: AnnotatedVenue) -> CourtSummary:
        return CourtSummary(**self._summary_fields(item))

    def _detail(self, item: AnnotatedVenue) -> CourtDetail:
        venue = item.venue
        schedule = venue.hours
        phone = (venue.phone or "").strip() or None
        return CourtDetail(
            **self._summary_fields(item),
            ratings=venue.ratings,
            summary=venue.summary,
            website_url=normalize_website(venue.website_url) or None,
            phone=phone,
            phone_dial=clean_phone_digits(phone) or None,
            email=(venue.email or "").strip() or None,
            youtube_url=venue.youtube_url,
            blog=venue.blog,
            timezone=schedule.timezone_name if schedule else None,
            hours=hours_rows(schedule, today=self.evaluator.today_key(schedule)),
        )
