"""Services package."""
from courtscout.services.clock import Clock, FixedClock, SystemClock
from courtscout.services.schedule_evaluator import ScheduleEvaluator, is_open_now
from courtscout.services.fetch_controller import FetchController, FetchResult
from courtscout.services.viewport_culler import RenderSet, cull
from courtscout.services.location_provider import (
    LocationProvider,
    StaticLocationProvider,
    resolve_location,
)
from courtscout.services.discovery_session import (
    DiscoverySession,
    SessionStatus,
    SessionView,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "ScheduleEvaluator",
    "is_open_now",
    "FetchController",
    "FetchResult",
    "RenderSet",
    "cull",
    "LocationProvider",
    "StaticLocationProvider",
    "resolve_location",
    "DiscoverySession",
    "SessionStatus",
    "SessionView",
]
