"""Dependency injection container for application components."""
import logging
from typing import Optional

from courtscout.api import NearbyVenuesClient
from courtscout.config import Settings
from courtscout.handlers import VenueHandler
from courtscout.models import GeoPoint
from courtscout.services import (
    Clock,
    DiscoverySession,
    FetchController,
    ScheduleEvaluator,
    SystemClock,
)

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Initializes and wires up all application dependencies. Sessions are not
    shared: each caller gets its own DiscoverySession and FetchController so
    supersession never crosses sessions.
    """

    def __init__(
        self,
        settings: Settings,
        nearby_api: Optional[NearbyVenuesClient] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize container with all dependencies.

        Args:
            settings: Application settings
            nearby_api: Override for the nearby-venues client (tests)
            clock: Override for the wall clock (tests)
        """
        logger.info("[Container] Initializing container")
        self.settings = settings

        # Initialize nearby-venues API client
        self.nearby_api = nearby_api or NearbyVenuesClient(
            base_url=settings.nearby_api_base_url,
            path=settings.nearby_api_path,
            timeout=settings.nearby_api_timeout_seconds,
        )
        logger.info(f"[Container] Nearby API client targeting {settings.nearby_api_url}")

        self.clock = clock or SystemClock()
        self.schedule_evaluator = ScheduleEvaluator(self.clock)

        # Initialize handler
        self.venue_handler = VenueHandler(
            self.create_session,
            self.schedule_evaluator,
            default_center=GeoPoint(
                latitude=settings.default_latitude, longitude=settings.default_longitude
            ),
            default_region_delta=settings.default_region_delta,
        )

        logger.info("[Container] Container initialized successfully")

    def create_session(self) -> DiscoverySession:
        """Build a fresh discovery session configured from settings."""
        settings = self.settings
        return DiscoverySession(
            FetchController(self.nearby_api),
            self.schedule_evaluator,
            radius_miles=settings.default_radius_miles,
            min_radius_miles=settings.min_radius_miles,
            max_radius_miles=settings.max_radius_miles,
            radius_step_miles=settings.radius_step_miles,
            wide_render_cap=settings.wide_render_cap,
            close_render_cap=settings.close_render_cap,
            default_render_cap=settings.default_render_cap,
            zoomed_out_delta=settings.zoomed_out_delta_threshold,
            near_me_delta=settings.near_me_delta,
            location_timeout=settings.location_timeout_seconds,
            recenter_on_fetch=settings.recenter_on_fetch,
        )

    async def shutdown(self):
        """Clean up resources on shutdown."""
        logger.info("[Container] Shutting down container")
        try:
            await self.nearby_api.close()
            logger.info("[Container] Nearby API client closed")
        except Exception as e:
            logger.error(f"[Container] Error closing nearby API client: {e}")
