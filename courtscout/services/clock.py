"""Clock and timezone collaborators injected into schedule evaluation."""
import logging
from datetime import datetime, timedelta, tzinfo
from typing import Optional

import pytz

logger = logging.getLogger(__name__)


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if moment.tzinfo is None or moment.tzinfo.utcoffset(moment) is None:
        return pytz.UTC.localize(moment)
    return moment


class Clock:
    """Source of "now" and of the host's local zone."""

    def now(self) -> datetime:
        raise NotImplementedError

    def local_timezone(self) -> Optional[tzinfo]:
        raise NotImplementedError


class SystemClock(Clock):
    """Real wall clock of the host."""

    def now(self) -> datetime:
        return datetime.now(pytz.UTC)

    def local_timezone(self) -> Optional[tzinfo]:
        try:
            return datetime.now().astimezone().tzinfo
        except (OSError, ValueError, OverflowError) as e:
            logger.warning(f"[SystemClock] Unable to resolve host timezone: {e}")
            return None


class FixedClock(Clock):
    """Clock pinned to an instant; used by tests and replays."""

    def __init__(self, instant: datetime, local_tz: Optional[tzinfo] = None):
        self.instant = ensure_aware(instant)
        self.local_tz = local_tz

    def now(self) -> datetime:
        return self.instant

    def local_timezone(self) -> Optional[tzinfo]:
        return self.local_tz

    def advance(self, **kwargs) -> datetime:
        """Move the pinned instant forward, e.g. advance(hours=2)."""
        self.instant = self.instant + timedelta(**kwargs)
        return self.instant
