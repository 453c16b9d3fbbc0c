"""Open-now evaluation from weekly schedules."""
import logging
import re
from datetime import datetime, tzinfo
from typing import Iterable, Optional

import pytz

from courtscout.errors import ScheduleParseError
from courtscout.models import AnnotatedVenue, Schedule, VenueRecord, WEEKDAY_KEYS
from courtscout.services.clock import Clock, ensure_aware

logger = logging.getLogger(__name__)

_WALL_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

SECONDS_PER_DAY = 24 * 3600


def parse_wall_clock(value: Optional[str]) -> int:
    """Parse "H:MM", "HH:MM" or "HH:MM:SS" into seconds since midnight.

    Raises:
        ScheduleParseError: If the value is blank, malformed or out of range
    """
    text = str(value if value is not None else "").strip()
    match = _WALL_CLOCK.match(text)
    if not match:
        raise ScheduleParseError(value)

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ScheduleParseError(value)

    return hours * 3600 + minutes * 60 + seconds


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Resolve an IANA zone name, or None when blank or unknown."""
    name = (name or "").strip()
    if not name:
        return None
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.debug(f"[ScheduleEvaluator] Unknown timezone: {name!r}")
        return None


def weekday_key(moment: datetime) -> str:
    """Weekday key ("mon".."sun") of a datetime. weekday() is 0=Monday."""
    return WEEKDAY_KEYS[moment.weekday()]


def previous_day_key(day_key: str) -> str:
    return WEEKDAY_KEYS[(WEEKDAY_KEYS.index(day_key) - 1) % 7]


def day_window(schedule: Schedule, day_key: str) -> Optional[tuple[int, int]]:
    """Parsed (open, close) seconds for a weekday, or None when closed.

    A malformed time closes only this day; other days stay usable.
    """
    hours = schedule.day(day_key)
    if hours is None:
        return None
    try:
        return parse_wall_clock(hours.open), parse_wall_clock(hours.close)
    except ScheduleParseError as e:
        logger.debug(f"[ScheduleEvaluator] Treating {day_key} as closed: {e}")
        return None


def effective_timezone(
    schedule: Schedule, local_tz: Optional[tzinfo] = None
) -> Optional[tzinfo]:
    """The schedule's own zone when it has one, else the caller's local zone.

    An explicit but unknown zone does not fall back: the venue's hours are
    meaningless in any other zone.
    """
    if schedule.timezone_name:
        return resolve_timezone(schedule.timezone_name)
    return local_tz


def venue_local_time(
    schedule: Schedule, as_of: datetime, local_tz: Optional[tzinfo] = None
) -> Optional[datetime]:
    """Wall-clock time at the venue, or None when no zone can be resolved."""
    tz = effective_timezone(schedule, local_tz)
    if tz is None:
        return None
    try:
        return ensure_aware(as_of).astimezone(tz)
    except (OverflowError, ValueError) as e:
        logger.debug(f"[ScheduleEvaluator] Cannot localize {as_of!r}: {e}")
        return None


def is_open_now(
    schedule: Optional[Schedule],
    as_of: datetime,
    local_tz: Optional[tzinfo] = None,
) -> bool:
    """Whether a venue is open at an instant.

    Checks today's window (24h when open == close, overnight when open > close)
    and then last night's overnight window spilling into today. Only one day
    of lookback is supported, so spans longer than 24 hours are not handled.
    Any ambiguity (no schedule, no zone, bad times) yields closed.

    Args:
        schedule: Weekly hours, may be None
        as_of: Instant to evaluate; naive values are treated as UTC
        local_tz: Zone used when the schedule carries none

    Returns:
        True when open, False otherwise. Never raises.
    """
    if schedule is None:
        return False

    local = venue_local_time(schedule, as_of, local_tz)
    if local is None:
        return False

    today = weekday_key(local)
    now_s = local.hour * 3600 + local.minute * 60 + local.second

    todays = day_window(schedule, today)
    if todays is not None:
        open_s, close_s = todays
        if open_s == close_s:
            return True
        if open_s < close_s:
            if open_s <= now_s < close_s:
                return True
        elif now_s >= open_s or now_s < close_s:
            return True

    yesterdays = day_window(schedule, previous_day_key(today))
    if yesterdays is not None:
        open_s, close_s = yesterdays
        if open_s > close_s and now_s < close_s:
            return True

    return False


class ScheduleEvaluator:
    """Evaluates schedules against an injected clock."""

    def __init__(self, clock: Clock):
        self.clock = clock

    def is_open_now(
        self, schedule: Optional[Schedule], as_of: Optional[datetime] = None
    ) -> bool:
        moment = as_of if as_of is not None else self.clock.now()
        return is_open_now(schedule, moment, self.clock.local_timezone())

    def today_key(
        self, schedule: Optional[Schedule], as_of: Optional[datetime] = None
    ) -> Optional[str]:
        """Weekday key at the venue right now, for highlighting today's hours."""
        if schedule is None:
            return None
        moment = as_of if as_of is not None else self.clock.now()
        local = venue_local_time(schedule, moment, self.clock.local_timezone())
        return weekday_key(local) if local is not None else None

    def annotate(
        self, records: Iterable[VenueRecord], as_of: Optional[datetime] = None
    ) -> list[AnnotatedVenue]:
        """Derive open_now and total_courts once for a fetched record set."""
        moment = as_of if as_of is not None else self.clock.now()
        local_tz = self.clock.local_timezone()
        return [
            AnnotatedVenue(
                venue=record,
                open_now=is_open_now(record.hours, moment, local_tz),
                total_courts=record.total_courts,
            )
            for record in records
        ]
