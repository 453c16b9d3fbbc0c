"""Data models package for courtscout."""
from courtscout.models.venue import (
    AccessType,
    AnnotatedVenue,
    BlogRef,
    Courts,
    DayHours,
    Ratings,
    Schedule,
    SkillLevel,
    SKILL_LABELS,
    VenueRecord,
    WEEKDAY_KEYS,
    normalize_skill_levels,
)
from courtscout.models.filters import (
    AccessFilter,
    CourtType,
    CourtsBucket,
    DEFAULT_FILTERS,
    FilterCriteria,
    SortKey,
)
from courtscout.models.viewport import (
    GeoPoint,
    Viewport,
    ZoomBucket,
    delta_for_zoom,
)
from courtscout.models.nearby import (
    NearbyCenter,
    NearbyQuery,
    NearbyResponse,
)
from courtscout.models.courts import (
    CourtDetail,
    CourtSummary,
    HoursRow,
    NearbyCourtsResponse,
)

__all__ = [
    # Venue models
    "AccessType",
    "AnnotatedVenue",
    "BlogRef",
    "Courts",
    "DayHours",
    "Ratings",
    "Schedule",
    "SkillLevel",
    "SKILL_LABELS",
    "VenueRecord",
    "WEEKDAY_KEYS",
    "normalize_skill_levels",
    # Filter models
    "AccessFilter",
    "CourtType",
    "CourtsBucket",
    "DEFAULT_FILTERS",
    "FilterCriteria",
    "SortKey",
    # Geography
    "GeoPoint",
    "Viewport",
    "ZoomBucket",
    "delta_for_zoom",
    # Nearby API models
    "NearbyCenter",
    "NearbyQuery",
    "NearbyResponse",
    # HTTP response models
    "CourtDetail",
    "CourtSummary",
    "HoursRow",
    "NearbyCourtsResponse",
]
