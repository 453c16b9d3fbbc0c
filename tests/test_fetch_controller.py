"""Unit tests for fetch supersession."""
import asyncio

import pytest

from courtscout.errors import FetchSuperseded, InvalidResponseError, NetworkError
from courtscout.services import FetchController

from factories import POINT_A, POINT_B, GatedNearbyClient, result_for


class TestFetchController:
    """Test single in-flight fetch semantics."""

    @pytest.mark.asyncio
    async def test_fetch_success(self):
        client = GatedNearbyClient()
        client.respond(POINT_A, result_for(1, 2))
        controller = FetchController(client)

        result = await controller.fetch_nearby(POINT_A, 25.0)

        assert [venue.id for venue in result.venues] == ["1", "2"]
        assert result.center == POINT_A
        assert result.radius_miles == 25.0
        assert controller.is_current(result.generation)
        assert not controller.in_flight
        assert client.calls[0].radius == 25.0

    @pytest.mark.asyncio
    async def test_newer_fetch_supersedes_older(self):
        client = GatedNearbyClient()
        client.respond(POINT_A, result_for(1), gated=True)
        client.respond(POINT_B, result_for(2))
        controller = FetchController(client)

        task_a = asyncio.create_task(controller.fetch_nearby(POINT_A, 25.0))
        await client.entered[POINT_A.latitude].wait()
        assert controller.in_flight

        result_b = await controller.fetch_nearby(POINT_B, 25.0)

        with pytest.raises(FetchSuperseded):
            await task_a
        assert [venue.id for venue in result_b.venues] == ["2"]

    @pytest.mark.asyncio
    async def test_late_response_of_superseded_fetch_is_discarded(self):
        client = GatedNearbyClient(stubborn=True)
        client.respond(POINT_A, result_for(1), gated=True)
        client.respond(POINT_B, result_for(2))
        controller = FetchController(client)

        task_a = asyncio.create_task(controller.fetch_nearby(POINT_A, 25.0))
        await client.entered[POINT_A.latitude].wait()

        result_b = await controller.fetch_nearby(POINT_B, 25.0)
        client.release(POINT_A)

        with pytest.raises(FetchSuperseded):
            await task_a
        assert controller.is_current(result_b.generation)

    @pytest.mark.asyncio
    async def test_failure_of_superseded_fetch_is_reported_as_superseded(self):
        client = GatedNearbyClient(stubborn=True)
        client.respond(POINT_A, NetworkError("connection reset"), gated=True)
        client.respond(POINT_B, result_for(2))
        controller = FetchController(client)

        task_a = asyncio.create_task(controller.fetch_nearby(POINT_A, 25.0))
        await client.entered[POINT_A.latitude].wait()
        await controller.fetch_nearby(POINT_B, 25.0)
        client.release(POINT_A)

        with pytest.raises(FetchSuperseded):
            await task_a

    @pytest.mark.asyncio
    async def test_current_failure_propagates(self):
        client = GatedNearbyClient()
        client.respond(POINT_A, InvalidResponseError("Nearby search failed"))
        controller = FetchController(client)

        with pytest.raises(InvalidResponseError):
            await controller.fetch_nearby(POINT_A, 25.0)

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_network_error(self):
        client = GatedNearbyClient()
        client.respond(POINT_A, RuntimeError("boom"))
        controller = FetchController(client)

        with pytest.raises(NetworkError) as exc_info:
            await controller.fetch_nearby(POINT_A, 25.0)

        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_cancel_abandons_in_flight_fetch(self):
        client = GatedNearbyClient()
        client.respond(POINT_A, result_for(1), gated=True)
        controller = FetchController(client)

        task_a = asyncio.create_task(controller.fetch_nearby(POINT_A, 25.0))
        await client.entered[POINT_A.latitude].wait()
        controller.cancel()

        with pytest.raises(FetchSuperseded):
            await task_a
        assert not controller.in_flight
