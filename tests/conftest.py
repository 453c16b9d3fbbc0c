"""Shared fixtures for courtscout tests."""
from datetime import datetime

import pytest
import pytz

from factories import make_venue


@pytest.fixture
def venue_factory():
    return make_venue


@pytest.fixture
def wednesday_noon_utc():
    """Wednesday 2024-05-15 12:00 UTC."""
    return pytz.UTC.localize(datetime(2024, 5, 15, 12, 0, 0))
