"""Display formatting for venues and filters."""
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from courtscout.models import (
    AccessFilter,
    AccessType,
    CourtType,
    CourtsBucket,
    Courts,
    FilterCriteria,
    HoursRow,
    SKILL_LABELS,
    Schedule,
    SkillLevel,
    SortKey,
    VenueRecord,
    WEEKDAY_KEYS,
)

EMPTY = "—"
RATING_SEGMENTS = 10

_DISPLAY_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")

DAY_LABELS = {
    "mon": "Mon",
    "tue": "Tue",
    "wed": "Wed",
    "thu": "Thu",
    "fri": "Fri",
    "sat": "Sat",
    "sun": "Sun",
}

ACCESS_LABELS = {
    AccessType.PUBLIC: "Public",
    AccessType.PAID: "Membership/Paid",
}

ACCESS_FILTER_LABELS = {
    AccessFilter.PUBLIC: "Free/Public",
    AccessFilter.PAID: "Membership/Paid",
}

SORT_LABELS = {
    SortKey.DISTANCE: "Distance",
    SortKey.RATING: "Rating",
    SortKey.COURTS: "Courts",
}


@dataclass(frozen=True)
class RatingSegments:
    """A rating laid out on a fixed 10-segment scale."""

    value: float
    full: int
    half: bool

    @property
    def label(self) -> str:
        return f"{self.value:.1f}/{RATING_SEGMENTS}"


def rating_segments(value: Any) -> Optional[RatingSegments]:
    """Bucket a 0-10 rating into filled segments plus an optional half."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    number = min(float(RATING_SEGMENTS), max(0.0, number))
    full = math.floor(number)
    return RatingSegments(value=number, full=full, half=number - full >= 0.5)


def format_rating(value: Any) -> str:
    segments = rating_segments(value)
    return segments.label if segments else EMPTY


def format_time(value: Optional[str]) -> str:
    """Render "13:05[:00]" as "1:05 PM"; anything unparseable is returned as-is."""
    text = str(value if value is not None else "").strip()
    if not text:
        return ""
    match = _DISPLAY_TIME.match(text)
    if not match:
        return text
    hours = int(match.group(1))
    suffix = "PM" if hours >= 12 else "AM"
    hours = hours % 12 or 12
    return f"{hours}:{match.group(2)} {suffix}"


def courts_text(courts: Optional[Courts]) -> str:
    if courts is None:
        return EMPTY
    parts = []
    if courts.indoor > 0:
        parts.append(f"{courts.indoor} indoor")
    if courts.outdoor > 0:
        parts.append(f"{courts.outdoor} outdoor")
    return " • ".join(parts) if parts else EMPTY


def access_text(access_type: AccessType) -> str:
    return ACCESS_LABELS.get(access_type, EMPTY)


def ordered_skill_levels(levels: frozenset[SkillLevel]) -> list[SkillLevel]:
    """Skill levels in vocabulary order, beginner first."""
    return [level for level in SkillLevel if level in levels]


def skill_levels_text(levels: frozenset[SkillLevel]) -> str:
    return " • ".join(SKILL_LABELS[level] for level in ordered_skill_levels(levels))


def full_address(venue: VenueRecord) -> str:
    parts = [venue.address, venue.city, venue.state, venue.zip]
    return ", ".join(str(part) for part in parts if part)


def normalize_website(url: Optional[str]) -> str:
    text = str(url or "").strip()
    if not text:
        return ""
    if re.match(r"^https?://", text, re.IGNORECASE):
        return text
    return f"https://{text}"


def clean_phone_digits(phone: Optional[str]) -> str:
    """Strip everything but digits, keeping a leading +."""
    text = str(phone or "").strip()
    if not text:
        return ""
    return re.sub(r"(?!^\+)[^\d]", "", text)


def hours_rows(schedule: Optional[Schedule], today: Optional[str] = None) -> list[HoursRow]:
    """Weekly hours table Mon..Sun, with half-known windows shown as "?"."""
    rows = []
    for day in WEEKDAY_KEYS:
        hours = schedule.day(day) if schedule is not None else None
        open_text = str(hours.open or "").strip() if hours else ""
        close_text = str(hours.close or "").strip() if hours else ""

        text = "Closed"
        if open_text and close_text:
            text = f"{format_time(open_text)} – {format_time(close_text)}"
        elif open_text:
            text = f"{format_time(open_text)} – ?"
        elif close_text:
            text = f"? – {format_time(close_text)}"

        rows.append(HoursRow(day=day, label=DAY_LABELS[day], text=text, is_today=day == today))
    return rows


def active_filters_label(criteria: FilterCriteria, sort_key: SortKey = SortKey.DISTANCE) -> str:
    """One-line summary of every non-default filter and sort choice."""
    parts = []
    if criteria.access != AccessFilter.ANY:
        parts.append(ACCESS_FILTER_LABELS[criteria.access])
    if criteria.court_type != CourtType.ANY:
        parts.append("Indoor" if criteria.court_type == CourtType.INDOOR else "Outdoor")
    if criteria.courts_bucket != CourtsBucket.ANY:
        parts.append(f"Courts: {criteria.courts_bucket.value}")
    if criteria.open_now_only:
        parts.append("Open now")
    if criteria.verified_only:
        parts.append("Verified only")
    if criteria.skill_levels:
        names = ", ".join(SKILL_LABELS[level] for level in ordered_skill_levels(criteria.skill_levels))
        parts.append(f"Skill: {names}")
    if sort_key != SortKey.DISTANCE:
        parts.append(f"Sort: {SORT_LABELS[sort_key]}")
    return " • ".join(parts)
