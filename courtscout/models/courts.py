"""Response models for the courts HTTP API."""
from typing import Optional, Union

from pydantic import BaseModel, Field

from courtscout.models.venue import BlogRef, Ratings
from courtscout.models.viewport import GeoPoint


class HoursRow(BaseModel):
    """One weekday line of a venue's hours table."""

    day: str  # "mon".."sun"
    label: str  # "Mon".."Sun"
    text: str  # "6:00 AM – 10:00 PM", "Closed", ...
    is_today: bool = False


class CourtSummary(BaseModel):
    """Minified court entry for map pins and list rows."""

    id: str
    name: str
    latitude: float
    longitude: float
    distance_mi: Optional[float] = None
    verified: bool = False
    open_now: bool = False
    rating_overall: Optional[float] = None
    rating_label: str = "—"
    total_courts: int = 0
    courts_text: str = "—"
    access_type: str = "unknown"
    access_text: str = "—"
    skill_levels: list[str] = Field(default_factory=list)
    skill_levels_text: str = ""
    address: str = ""


class CourtDetail(CourtSummary):
    """Full court entry (verbose mode)."""

    ratings: Ratings = Field(default_factory=Ratings)
    summary: Optional[str] = None
    website_url: Optional[str] = None
    phone: Optional[str] = None
    phone_dial: Optional[str] = None
    email: Optional[str] = None
    youtube_url: Optional[str] = None
    blog: Optional[BlogRef] = None
    timezone: Optional[str] = None
    hours: list[HoursRow] = Field(default_factory=list)


class NearbyCourtsResponse(BaseModel):
    """View-ready state of a discovery session."""

    status: str
    center: Optional[GeoPoint] = None
    radius_miles: float
    ranked_count: int = 0
    rendered_count: int = 0
    render_cap: int = 0
    truncated: bool = False
    zoom_bucket: Optional[str] = None
    filters_label: str = ""
    error: Optional[str] = None
    stale: bool = False  # error is set but courts come from the last good fetch
    courts: Union[list[CourtDetail], list[CourtSummary]] = Field(default_factory=list)
