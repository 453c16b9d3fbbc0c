"""Render-set selection for a map viewport."""
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from courtscout.models import AnnotatedVenue, Viewport, ZoomBucket
from courtscout.models.viewport import ZOOMED_OUT_DELTA_DEGREES

logger = logging.getLogger(__name__)

WIDE_RENDER_CAP = 250
CLOSE_RENDER_CAP = 500
DEFAULT_RENDER_CAP = 250


@dataclass
class RenderSet:
    """Venues a map should draw for one viewport.

    This is a render-cost bound only; the ranked list it came from stays the
    source of truth for list views and counts.
    """

    venues: list[AnnotatedVenue] = field(default_factory=list)
    cap: int = DEFAULT_RENDER_CAP
    zoom_bucket: Optional[ZoomBucket] = None
    in_bounds: int = 0  # Venues inside the viewport before the cap applied

    @property
    def truncated(self) -> bool:
        return self.in_bounds > len(self.venues)

    def __len__(self) -> int:
        return len(self.venues)


def render_cap(
    viewport: Optional[Viewport],
    wide_cap: int = WIDE_RENDER_CAP,
    close_cap: int = CLOSE_RENDER_CAP,
    default_cap: int = DEFAULT_RENDER_CAP,
    threshold: float = ZOOMED_OUT_DELTA_DEGREES,
) -> int:
    if viewport is None:
        return default_cap
    if viewport.zoom_bucket(threshold) == ZoomBucket.WIDE:
        return wide_cap
    return close_cap


def cull(
    ranked: Sequence[AnnotatedVenue],
    viewport: Optional[Viewport],
    wide_cap: int = WIDE_RENDER_CAP,
    close_cap: int = CLOSE_RENDER_CAP,
    default_cap: int = DEFAULT_RENDER_CAP,
    threshold: float = ZOOMED_OUT_DELTA_DEGREES,
) -> RenderSet:
    """Keep ranked venues inside the viewport, truncated to the zoom's cap.

    Truncation keeps rank order, so verified and closer venues win when the
    cap binds. Without a viewport the first default_cap venues are returned.
    """
    cap = render_cap(viewport, wide_cap, close_cap, default_cap, threshold)

    if viewport is None:
        return RenderSet(venues=list(ranked[:cap]), cap=cap, in_bounds=len(ranked))

    visible = [
        item
        for item in ranked
        if viewport.contains(item.venue.latitude, item.venue.longitude)
    ]
    render_set = RenderSet(
        venues=visible[:cap],
        cap=cap,
        zoom_bucket=viewport.zoom_bucket(threshold),
        in_bounds=len(visible),
    )
    if render_set.truncated:
        logger.debug(
            f"[ViewportCuller] Capped {render_set.in_bounds} visible venues to {cap} "
            f"({render_set.zoom_bucket.value} zoom)"
        )
    return render_set
