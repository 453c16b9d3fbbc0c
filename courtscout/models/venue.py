"""Venue data models using Pydantic."""
import json
import logging
import math
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

RATING_MIN = 0.0
RATING_MAX = 10.0


class AccessType(str, Enum):
    """How a venue can be used."""

    UNKNOWN = "unknown"
    PUBLIC = "public"
    PAID = "paid"


class SkillLevel(str, Enum):
    """Skill-level vocabulary a venue may be tagged with."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADV_INTERMEDIATE = "adv_intermediate"
    ADVANCED = "advanced"
    PRO = "pro"


SKILL_LABELS: dict[SkillLevel, str] = {
    SkillLevel.BEGINNER: "Beginner (<3.0)",
    SkillLevel.INTERMEDIATE: "Intermediate (3.0–3.5)",
    SkillLevel.ADV_INTERMEDIATE: "Advanced Intermediate (3.5–4.0)",
    SkillLevel.ADVANCED: "Advanced (4.0+)",
    SkillLevel.PRO: "Pro (5.0+)",
}


def normalize_skill_levels(value: Any) -> frozenset[SkillLevel]:
    """Normalize a loosely-typed skill-level field into a set of SkillLevel.

    The nearby API has been seen to send any of:
    - a JSON array: ["beginner", "pro"]
    - a JSON-encoded array inside a string: '["beginner","pro"]'
    - a comma-delimited string: "beginner, pro"

    Unknown tags are dropped.
    """
    if value is None:
        return frozenset()

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return frozenset()
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        items = parsed if isinstance(parsed, list) else text.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    else:
        logger.debug(f"[VenueModels] Ignoring skill levels of type {type(value).__name__}")
        return frozenset()

    levels: set[SkillLevel] = set()
    for item in items:
        key = item.value if isinstance(item, SkillLevel) else str(item).strip().lower()
        if not key:
            continue
        try:
            levels.add(SkillLevel(key))
        except ValueError:
            logger.debug(f"[VenueModels] Dropping unknown skill level: {key!r}")
    return frozenset(levels)


def coerce_rating(value: Any) -> Optional[float]:
    """Coerce a rating into [0, 10]; anything non-numeric is treated as absent."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return min(RATING_MAX, max(RATING_MIN, number))


def coerce_count(value: Any) -> int:
    """Coerce a court count to a non-negative integer (missing counts as 0)."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return max(0, int(number))


class Ratings(BaseModel):
    """Sub-ratings on the 0-10 scale. Each one may be absent."""

    court: Optional[float] = None
    facility: Optional[float] = None
    amenities: Optional[float] = None
    location: Optional[float] = None
    gameplay: Optional[float] = None
    vibe: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def clamp_rating(cls, v: Any) -> Optional[float]:
        return coerce_rating(v)


class Courts(BaseModel):
    """Court capacity breakdown."""

    indoor: int = 0
    outdoor: int = 0

    model_config = ConfigDict(frozen=True)

    @field_validator("indoor", "outdoor", mode="before")
    @classmethod
    def clamp_count(cls, v: Any) -> int:
        return coerce_count(v)

    @property
    def total(self) -> int:
        return self.indoor + self.outdoor


class DayHours(BaseModel):
    """Raw open/close wall-clock strings for one weekday.

    Kept unparsed so a malformed value only disables its own day.
    """

    open: Optional[str] = None
    close: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("open", "close", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v)


class Schedule(BaseModel):
    """Weekly operating hours plus the IANA zone they are expressed in.

    A missing weekday means closed that day. open == close means open 24h,
    open > close means the window crosses midnight into the next day.
    """

    mon: Optional[DayHours] = None
    tue: Optional[DayHours] = None
    wed: Optional[DayHours] = None
    thu: Optional[DayHours] = None
    fri: Optional[DayHours] = None
    sat: Optional[DayHours] = None
    sun: Optional[DayHours] = None
    tz: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator(*WEEKDAY_KEYS, mode="before")
    @classmethod
    def drop_non_mapping_days(cls, v: Any) -> Any:
        """Anything that is not a mapping (e.g. "closed", []) means closed."""
        if v is None or isinstance(v, (dict, DayHours)):
            return v
        return None

    def day(self, day_key: str) -> Optional[DayHours]:
        """Get hours for a weekday key ("mon".."sun")."""
        if day_key not in WEEKDAY_KEYS:
            return None
        return getattr(self, day_key)

    @property
    def timezone_name(self) -> Optional[str]:
        """Explicit zone, or None when blank/absent."""
        name = (self.tz or "").strip()
        return name or None


class BlogRef(BaseModel):
    """Reference to the write-up for a venue."""

    id: Optional[int] = None
    slug: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None


class VenueRecord(BaseModel):
    """A court venue as returned by the nearby API. Immutable once fetched."""

    # Identity and location
    id: str
    name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    latitude: float
    longitude: float
    distance_mi: Optional[float] = None  # Precomputed by the API, never derived here

    # Verified means the venue was physically visited by the data source
    visited: bool = False

    rating_overall: Optional[float] = None
    ratings: Ratings = Field(default_factory=Ratings)

    courts: Courts = Field(default_factory=Courts)
    access_type: AccessType = AccessType.UNKNOWN
    summary: Optional[str] = None

    youtube_url: Optional[str] = None
    website_url: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    hours: Optional[Schedule] = None
    blog: Optional[BlogRef] = None

    skill_levels: frozenset[SkillLevel] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices("skill_levels", "skillLevels"),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def convert_id_to_string(cls, v: Any) -> str:
        """The API sends numeric ids; normalize to string."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v

    @field_validator("zip", mode="before")
    @classmethod
    def convert_zip_to_string(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v)

    @field_validator("visited", mode="before")
    @classmethod
    def convert_visited(cls, v: Any) -> bool:
        """Only a value numerically equal to 1 counts as verified."""
        if isinstance(v, bool):
            return v
        if v is None:
            return False
        try:
            return float(v) == 1
        except (TypeError, ValueError):
            return False

    @field_validator("distance_mi", mode="before")
    @classmethod
    def convert_distance(cls, v: Any) -> Optional[float]:
        if v is None or isinstance(v, bool) or v == "":
            return None
        try:
            distance = float(v)
        except (TypeError, ValueError):
            return None
        return None if math.isnan(distance) else distance

    @field_validator("rating_overall", mode="before")
    @classmethod
    def clamp_overall_rating(cls, v: Any) -> Optional[float]:
        return coerce_rating(v)

    @field_validator("ratings", "courts", mode="before")
    @classmethod
    def default_when_null(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("access_type", mode="before")
    @classmethod
    def convert_access_type(cls, v: Any) -> AccessType:
        key = str(v or "").strip().lower()
        try:
            return AccessType(key)
        except ValueError:
            return AccessType.UNKNOWN

    @field_validator("skill_levels", mode="before")
    @classmethod
    def convert_skill_levels(cls, v: Any) -> frozenset[SkillLevel]:
        return normalize_skill_levels(v)

    @property
    def total_courts(self) -> int:
        return self.courts.total

    def __str__(self) -> str:
        return (
            f"VenueRecord(id={self.id}, name={self.name}, "
            f"lat={self.latitude}, lng={self.longitude})"
        )


class AnnotatedVenue(BaseModel):
    """VenueRecord plus values derived once per fetch.

    open_now is a snapshot taken at annotation time and goes stale as the
    clock moves; DiscoverySession.refresh_open_status re-derives it.
    """

    venue: VenueRecord
    open_now: bool = False
    total_courts: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def verified(self) -> bool:
        return self.venue.visited
