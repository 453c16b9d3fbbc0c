"""Unit tests for the nearby-venues API client."""
import pytest
from unittest.mock import AsyncMock, Mock, patch
import httpx

from courtscout.api import NearbyResult, NearbyVenuesClient
from courtscout.errors import InvalidResponseError, NetworkError, RequestTimeoutError
from courtscout.models import NearbyQuery, SkillLevel


@pytest.fixture
def api_client():
    """Create nearby-venues API client for testing."""
    client = NearbyVenuesClient(
        base_url="https://courts.example.com/",
        timeout=10.0,
    )
    yield client


@pytest.fixture
def query():
    return NearbyQuery(lat=40.7128, lng=-74.006, radius=25)


def json_response(data, status_code=200):
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.json.return_value = data
    return mock_response


class TestNearbyVenuesClient:
    """Unit tests for NearbyVenuesClient."""

    def test_url(self, api_client):
        assert api_client.url == "https://courts.example.com/api/v1/locations/nearby.php"

    @pytest.mark.asyncio
    async def test_fetch_nearby_success(self, api_client, query):
        """Test successful fetch with coercion of loosely-typed fields."""
        mock_response_data = {
            "ok": True,
            "center": {"lat": 40.71, "lng": -74.0, "zoom": 12},
            "locations": [
                {
                    "id": 101,
                    "name": "Pier 25 Courts",
                    "latitude": 40.72,
                    "longitude": -74.01,
                    "distance_mi": "0.8",
                    "visited": "1",
                    "rating_overall": 8.4,
                    "courts": {"indoor": 0, "outdoor": 4},
                    "access_type": "Public",
                    "skill_levels": '["beginner","intermediate"]',
                    "hours": {"mon": {"open": "06:00", "close": "22:00"}, "tz": "America/New_York"},
                },
                {
                    "id": "102",
                    "name": "Midtown Club",
                    "latitude": 40.75,
                    "longitude": -73.99,
                    "visited": 0,
                    "access_type": "paid",
                    "skill_levels": "advanced, pro",
                },
            ],
        }

        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = json_response(mock_response_data)

            result = await api_client.fetch_nearby(query)

            assert isinstance(result, NearbyResult)
            assert [venue.id for venue in result.venues] == ["101", "102"]
            assert result.skipped == 0
            assert result.center.zoom == 12

            first, second = result.venues
            assert first.visited is True
            assert first.distance_mi == 0.8
            assert first.skill_levels == {SkillLevel.BEGINNER, SkillLevel.INTERMEDIATE}
            assert second.visited is False
            assert second.skill_levels == {SkillLevel.ADVANCED, SkillLevel.PRO}

            # Verify request
            mock_request.assert_called_once()
            call_kwargs = mock_request.call_args.kwargs
            assert call_kwargs["method"] == "GET"
            assert call_kwargs["url"] == "https://courts.example.com/api/v1/locations/nearby.php"
            assert call_kwargs["params"] == {"lat": "40.7128", "lng": "-74.006", "radius": "25"}

    @pytest.mark.asyncio
    async def test_malformed_records_skipped(self, api_client, query):
        """One bad venue must not discard the rest."""
        mock_response_data = {
            "ok": True,
            "locations": [
                {"id": 1, "name": "Good", "latitude": 40.0, "longitude": -74.0},
                {"id": 2, "name": "No coordinates"},
                "not-a-record",
                {"id": 3, "name": "Bad latitude", "latitude": "north", "longitude": -74.0},
            ],
        }

        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = json_response(mock_response_data)

            result = await api_client.fetch_nearby(query)

            assert [venue.id for venue in result.venues] == ["1"]
            assert result.skipped == 3

    @pytest.mark.asyncio
    async def test_missing_locations_is_empty(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = json_response({"ok": True})

            result = await api_client.fetch_nearby(query)

            assert result.venues == []
            assert result.center is None

    @pytest.mark.asyncio
    async def test_ok_false_raises_invalid_response(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = json_response({"ok": False, "error": "Radius too large"})

            with pytest.raises(InvalidResponseError) as exc_info:
                await api_client.fetch_nearby(query)

            assert exc_info.value.message == "Radius too large"
            assert exc_info.value.recoverable

    @pytest.mark.asyncio
    async def test_malformed_envelope(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = json_response(["unexpected", "list"])

            with pytest.raises(InvalidResponseError):
                await api_client.fetch_nearby(query)

    @pytest.mark.asyncio
    async def test_non_json_body(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_response = Mock()
            mock_response.status_code = 200
            mock_response.json.side_effect = ValueError("Expecting value")
            mock_request.return_value = mock_response

            with pytest.raises(InvalidResponseError):
                await api_client.fetch_nearby(query)

    @pytest.mark.asyncio
    async def test_http_error_uses_api_message(self, api_client, query):
        """Test HTTP error handling."""
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_response = Mock()
            mock_response.status_code = 500
            mock_response.json.return_value = {"ok": False, "error": "Database unavailable"}
            mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "Server error", request=Mock(), response=mock_response
            )
            mock_request.return_value = mock_response

            with pytest.raises(NetworkError) as exc_info:
                await api_client.fetch_nearby(query)

            assert exc_info.value.message == "Database unavailable"
            assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_http_error_without_body(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_response = Mock()
            mock_response.status_code = 503
            mock_response.json.side_effect = ValueError("no body")
            mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
                "Unavailable", request=Mock(), response=mock_response
            )
            mock_request.return_value = mock_response

            with pytest.raises(NetworkError) as exc_info:
                await api_client.fetch_nearby(query)

            assert exc_info.value.message == "Request failed (503)"

    @pytest.mark.asyncio
    async def test_timeout(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ReadTimeout("timed out")

            with pytest.raises(RequestTimeoutError):
                await api_client.fetch_nearby(query)

    @pytest.mark.asyncio
    async def test_connection_error(self, api_client, query):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(NetworkError):
                await api_client.fetch_nearby(query)

    @pytest.mark.asyncio
    async def test_close(self, api_client):
        with patch.object(api_client.client, "aclose", new_callable=AsyncMock) as mock_close:
            await api_client.close()
            mock_close.assert_awaited_once()
