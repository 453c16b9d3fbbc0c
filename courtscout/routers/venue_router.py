"""FastAPI routes for court endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from courtscout.models import (
    AccessFilter,
    CourtType,
    CourtsBucket,
    FilterCriteria,
    GeoPoint,
    NearbyCourtsResponse,
    SkillLevel,
    SortKey,
    Viewport,
)
from courtscout.services import SessionStatus

logger = logging.getLogger(__name__)

# Create router at module level
router = APIRouter()

# Global handler reference - set during startup
_venue_handler = None


def set_venue_handler(handler):
    """Set the venue handler instance (called during startup)."""
    global _venue_handler
    _venue_handler = handler
    if handler is None:
        logger.info("[VenueRouter] Handler cleared")
    else:
        logger.info("[VenueRouter] Handler injected successfully")


def get_handler():
    """Get the venue handler, raising error if not initialized."""
    if _venue_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _venue_handler


def parse_skill_levels(values: Optional[list[str]]) -> list[SkillLevel]:
    """Requested skill tags, repeated or comma-separated.

    Unlike tags on API records, an unknown requested tag is rejected: dropping
    it would leave an empty set, which matches every venue.
    """
    tags = [
        tag.strip().lower()
        for value in values or []
        for tag in value.split(",")
        if tag.strip()
    ]
    known = {level.value for level in SkillLevel}
    unknown = sorted({tag for tag in tags if tag not in known})
    if unknown:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown skill level(s): {', '.join(unknown)}; expected one of {', '.join(sorted(known))}",
        )
    return [SkillLevel(tag) for tag in tags]


def build_viewport(
    lat: Optional[float],
    lng: Optional[float],
    view_lat: Optional[float],
    view_lng: Optional[float],
    lat_delta: Optional[float],
    lng_delta: Optional[float],
    default_center: Optional[GeoPoint] = None,
) -> Optional[Viewport]:
    """Viewport from query params.

    Spans are required. The center defaults to the query point, or to
    default_center when the request carries no location.
    """
    if lat_delta is None and lng_delta is None:
        return None
    if lat_delta is None or lng_delta is None:
        raise HTTPException(status_code=422, detail="lat_delta and lng_delta must be given together")
    if lat is not None and lng is not None:
        fallback: Optional[GeoPoint] = GeoPoint(latitude=lat, longitude=lng)
    else:
        fallback = default_center
    try:
        return Viewport(
            latitude=view_lat if view_lat is not None else getattr(fallback, "latitude", None),
            longitude=view_lng if view_lng is not None else getattr(fallback, "longitude", None),
            latitude_delta=lat_delta,
            longitude_delta=lng_delta,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid viewport: {e.errors()[0]['msg']}")


@router.get(
    "/v1/courts/nearby",
    response_model=NearbyCourtsResponse,
    summary="Get nearby courts",
    description="Get courts within a radius, filtered, ranked verified-first and culled to a viewport",
)
async def get_courts_nearby(
    lat: Optional[float] = Query(None, description="Latitude; omit with lng for the default region", ge=-90, le=90),
    lng: Optional[float] = Query(None, description="Longitude; omit with lat for the default region", ge=-180, le=180),
    radius: float = Query(25, description="Radius in miles", ge=5, le=200),
    access: AccessFilter = Query(AccessFilter.ANY, description="Access category"),
    court_type: CourtType = Query(CourtType.ANY, description="Require indoor or outdoor courts"),
    courts_bucket: CourtsBucket = Query(CourtsBucket.ANY, description="Total court count range"),
    verified_only: bool = Query(False, description="Only verified venues"),
    open_now_only: bool = Query(False, description="Only venues open right now"),
    skill_levels: Optional[list[str]] = Query(
        None, description="Skill levels (repeat the param or comma-separate); any match"
    ),
    sort_by: SortKey = Query(SortKey.DISTANCE, description="distance | rating | courts"),
    view_lat: Optional[float] = Query(None, description="Viewport center latitude", ge=-90, le=90),
    view_lng: Optional[float] = Query(None, description="Viewport center longitude", ge=-180, le=180),
    lat_delta: Optional[float] = Query(None, description="Viewport latitude span", gt=0),
    lng_delta: Optional[float] = Query(None, description="Viewport longitude span", gt=0),
    verbose: bool = Query(
        False,
        description="If true, return full CourtDetail; if false, return CourtSummary",
    ),
) -> NearbyCourtsResponse:
    """Get nearby courts as a view-ready render set."""
    handler = get_handler()
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=422, detail="lat and lng must be given together")
    viewport = build_viewport(
        lat, lng, view_lat, view_lng, lat_delta, lng_delta, default_center=handler.default_center
    )
    criteria = FilterCriteria(
        access=access,
        court_type=court_type,
        courts_bucket=courts_bucket,
        verified_only=verified_only,
        open_now_only=open_now_only,
        skill_levels=parse_skill_levels(skill_levels),
    )

    try:
        response = await handler.get_courts_nearby(
            lat, lng, radius, criteria, sort_by, viewport=viewport, verbose=verbose
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[VenueRouter] Error in get_courts_nearby: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if response.status == SessionStatus.ERROR.value and not response.stale:
        # Nothing fetched and nothing older to fall back on
        raise HTTPException(status_code=502, detail=response.error or "Nearby search failed")

    return response


@router.get(
    "/ping",
    summary="Health check",
    description="Health check endpoint",
)
def ping() -> dict[str, str]:
    """Health check endpoint."""
    handler = get_handler()
    return handler.ping()
