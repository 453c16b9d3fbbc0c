"""Request/response models for the nearby-venues API."""
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class NearbyQuery(BaseModel):
    """Parameters for GET /api/v1/locations/nearby.php."""

    lat: float
    lng: float
    radius: float  # Miles

    def to_query_params(self) -> dict[str, str]:
        """Convert parameters to query string dict."""
        # Whole-mile radii go out without a trailing ".0"
        radius = int(self.radius) if float(self.radius).is_integer() else self.radius
        return {
            "lat": str(self.lat),
            "lng": str(self.lng),
            "radius": str(radius),
        }


class NearbyCenter(BaseModel):
    """Center the API resolved for the query, with a suggested zoom level."""

    lat: float
    lng: float
    zoom: Optional[float] = None


class NearbyResponse(BaseModel):
    """Envelope returned by the nearby API.

    locations stay raw here; the client validates each record on its own so
    one malformed venue does not discard the whole result set.
    """

    ok: bool
    error: Optional[str] = None
    center: Optional[NearbyCenter] = None
    locations: list[Any] = Field(default_factory=list)

    @field_validator("locations", mode="before")
    @classmethod
    def default_when_not_list(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []

    @field_validator("center", mode="before")
    @classmethod
    def drop_incomplete_center(cls, v: Any) -> Any:
        """A center missing lat or lng is unusable for recentering."""
        if not isinstance(v, dict):
            return None
        if not v.get("lat") or not v.get("lng"):
            return None
        return v
