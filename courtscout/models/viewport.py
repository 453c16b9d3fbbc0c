"""Geographic point and map viewport models."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# A viewport spanning more than this many degrees on either axis is "wide"
ZOOMED_OUT_DELTA_DEGREES = 3.0

NEAR_ME_DELTA = 0.25

DEFAULT_ZOOM = 11
MIN_ZOOM = 6
MAX_ZOOM = 16


class GeoPoint(BaseModel):
    """A latitude/longitude pair."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.latitude:.6f}, {self.longitude:.6f})"


class ZoomBucket(str, Enum):
    WIDE = "wide"
    CLOSE = "close"


class Viewport(BaseModel):
    """Visible map region: center plus full latitude/longitude spans.

    Bounds are center ± delta/2 and inclusive on every edge. The zoom bucket
    only sizes the render cap; it never decides which venues exist.
    """

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    latitude_delta: float = Field(gt=0)
    longitude_delta: float = Field(gt=0)

    model_config = ConfigDict(frozen=True)

    @property
    def lat_min(self) -> float:
        return self.latitude - self.latitude_delta / 2

    @property
    def lat_max(self) -> float:
        return self.latitude + self.latitude_delta / 2

    @property
    def lng_min(self) -> float:
        return self.longitude - self.longitude_delta / 2

    @property
    def lng_max(self) -> float:
        return self.longitude + self.longitude_delta / 2

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.lat_min <= latitude <= self.lat_max
            and self.lng_min <= longitude <= self.lng_max
        )

    def zoom_bucket(self, threshold: float = ZOOMED_OUT_DELTA_DEGREES) -> ZoomBucket:
        if self.latitude_delta > threshold or self.longitude_delta > threshold:
            return ZoomBucket.WIDE
        return ZoomBucket.CLOSE

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def around(cls, point: GeoPoint, delta: float = NEAR_ME_DELTA) -> "Viewport":
        """Square region centered on a point."""
        return cls(
            latitude=point.latitude,
            longitude=point.longitude,
            latitude_delta=delta,
            longitude_delta=delta,
        )

    @classmethod
    def from_zoom(
        cls, latitude: float, longitude: float, zoom: Optional[float] = None
    ) -> "Viewport":
        """Region for a map zoom level as reported by the nearby API."""
        delta = delta_for_zoom(zoom)
        return cls(
            latitude=latitude,
            longitude=longitude,
            latitude_delta=delta,
            longitude_delta=delta,
        )


def delta_for_zoom(zoom: Optional[float]) -> float:
    """Map a zoom level (clamped to 6..16, default 11) to a span in degrees."""
    z = min(MAX_ZOOM, max(MIN_ZOOM, DEFAULT_ZOOM if zoom is None else zoom))
    if z >= 14:
        return 0.06
    if z >= 13:
        return 0.09
    if z >= 12:
        return 0.14
    if z >= 11:
        return 0.22
    if z >= 10:
        return 0.35
    return 0.6
