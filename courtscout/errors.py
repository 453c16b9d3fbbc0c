"""Typed failures raised by the discovery engine."""
from typing import Optional


class DiscoveryError(Exception):
    """Base class for every failure the engine reports."""

    recoverable = True

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class LocationPermissionDenied(DiscoveryError):
    """Raised when the location provider refuses to supply a position.

    Fatal to center resolution only; callers may still supply a manual center.
    """

    recoverable = False


class NetworkError(DiscoveryError):
    """Raised on transport failures or non-2xx responses from the nearby API."""
    pass


class InvalidResponseError(DiscoveryError):
    """Raised when the nearby API answers with ok=false or an unparseable body."""
    pass


class RequestTimeoutError(DiscoveryError):
    """Raised when a location lookup or nearby fetch takes too long."""
    pass


class ScheduleParseError(DiscoveryError, ValueError):
    """Raised for a malformed wall-clock time in one day of a schedule."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid wall-clock time: {value!r}")


class FetchSuperseded(DiscoveryError):
    """Raised to the awaiter of a fetch that a newer fetch replaced."""

    def __init__(self, generation: int):
        self.generation = generation
        super().__init__(f"Fetch #{generation} was superseded")


class SessionClosedError(DiscoveryError):
    """Raised when a disposed session is asked to change state."""

    recoverable = False

    def __init__(self):
        super().__init__("Discovery session is closed")
