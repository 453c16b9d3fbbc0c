"""External API clients."""
from courtscout.api.nearby_client import NearbyResult, NearbyVenuesClient

__all__ = ["NearbyResult", "NearbyVenuesClient"]
