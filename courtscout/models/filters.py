"""Filter criteria and sort keys applied to fetched venues."""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from courtscout.models.venue import SkillLevel, normalize_skill_levels


class AccessFilter(str, Enum):
    ANY = "any"
    PUBLIC = "public"
    PAID = "paid"


class CourtType(str, Enum):
    ANY = "any"
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


class CourtsBucket(str, Enum):
    """Capacity ranges on total court count."""

    ANY = "any"
    SMALL = "1-2"
    MEDIUM = "3-5"
    LARGE = "6-9"
    XLARGE = "10+"

    @property
    def bounds(self) -> tuple[int, Optional[int]]:
        """Inclusive (min, max) court counts; max is None when unbounded."""
        return _BUCKET_BOUNDS[self]

    def contains(self, total_courts: int) -> bool:
        low, high = self.bounds
        if total_courts < low:
            return False
        return high is None or total_courts <= high


_BUCKET_BOUNDS: dict[CourtsBucket, tuple[int, Optional[int]]] = {
    CourtsBucket.ANY: (0, None),
    CourtsBucket.SMALL: (1, 2),
    CourtsBucket.MEDIUM: (3, 5),
    CourtsBucket.LARGE: (6, 9),
    CourtsBucket.XLARGE: (10, None),
}


class SortKey(str, Enum):
    DISTANCE = "distance"  # ascending, missing distance last
    RATING = "rating"  # descending, missing rating below any real rating
    COURTS = "courts"  # descending by total court count


class FilterCriteria(BaseModel):
    """Constraints a venue must all satisfy to be listed.

    skill_levels is the one disjunctive criterion: a venue matches when it
    carries at least one of the requested tags. An empty set disables it.
    """

    access: AccessFilter = AccessFilter.ANY
    court_type: CourtType = CourtType.ANY
    verified_only: bool = False
    open_now_only: bool = False
    courts_bucket: CourtsBucket = CourtsBucket.ANY
    skill_levels: frozenset[SkillLevel] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True)

    @field_validator("skill_levels", mode="before")
    @classmethod
    def convert_skill_levels(cls, v: Any) -> frozenset[SkillLevel]:
        return normalize_skill_levels(v)

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_FILTERS


DEFAULT_FILTERS = FilterCriteria()
