from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from core.exceptions import ExternalServiceError, InvalidPosition
from core.http.osrm import Directions
from street_coverage.models import Position
from street_coverage.tracker import CoverageTracker
from tracking.services.drive_service import DriveController


def _osm_response(offset: float = 0.0) -> dict:
    return {
        "elements": [
            {"type": "node", "id": 1, "lat": 40.758 + offset, "lon": -73.986},
            {"type": "node", "id": 2, "lat": 40.759 + offset, "lon": -73.985},
            {"type": "node", "id": 3, "lat": 40.762 + offset, "lon": -73.980},
            {"type": "node", "id": 4, "lat": 40.763 + offset, "lon": -73.979},
            {
                "type": "way",
                "id": 10,
                "nodes": [1, 2],
                "tags": {"highway": "residential"},
            },
            {
                "type": "way",
                "id": 20,
                "nodes": [3, 4],
                "tags": {"highway": "primary"},
            },
            {"type": "way", "id": 30, "nodes": [2, 3], "tags": {"highway": "footway"}},
        ],
    }


class FakeNetworkClient:
    def __init__(self, responses: list[dict]) -> None:
        self.responses = list(responses)
        self.requests = []

    async def fetch_network(self, bbox):
        self.requests.append(bbox)
        return self.responses.pop(0)


class FakeSessions:
    def __init__(self) -> None:
        self.create_session = AsyncMock(return_value=SimpleNamespace(id="abc123"))
        self.record_position = AsyncMock()
        self.end_session = AsyncMock()


def _controller(**kwargs) -> DriveController:
    kwargs.setdefault("network_client", FakeNetworkClient([_osm_response()]))
    kwargs.setdefault("directions_client", AsyncMock())
    kwargs.setdefault("sessions", FakeSessions())
    return DriveController(tracker=CoverageTracker(threshold_meters=20.0), **kwargs)


@pytest.mark.asyncio
async def test_load_area_ingests_network_around_position() -> None:
    network = FakeNetworkClient([_osm_response()])
    controller = _controller(network_client=network)

    state = await controller.load_area_around(40.76, -73.983, 0.04)

    assert [seg.id for seg in state.segments] == ["way/10", "way/20"]
    bbox = network.requests[0]
    assert bbox.north == pytest.approx(40.80)
    assert bbox.west == pytest.approx(-74.023)
    assert not controller.needs_area(Position(lat=40.76, lng=-73.983))
    assert controller.needs_area(Position(lat=41.0, lng=-73.983))


@pytest.mark.asyncio
async def test_stale_area_load_is_discarded() -> None:
    release_first = asyncio.Event()

    class SlowFirstClient:
        def __init__(self) -> None:
            self.calls = 0

        async def fetch_network(self, bbox):
            self.calls += 1
            if self.calls == 1:
                await release_first.wait()
                return _osm_response(offset=1.0)
            return _osm_response()

    controller = _controller(network_client=SlowFirstClient())

    first = asyncio.create_task(controller.load_area_around(41.76, -73.983))
    await asyncio.sleep(0)
    latest = await controller.load_area_around(40.76, -73.983)
    release_first.set()
    stale = await first

    assert stale is None
    assert latest is not None
    segment = controller.tracker.get_state().segments[0]
    assert segment.coordinates[0] == (-73.986, 40.758)


@pytest.mark.asyncio
async def test_session_flow_updates_coverage_and_distance() -> None:
    sessions = FakeSessions()
    controller = _controller(sessions=sessions)
    await controller.load_area_around(40.76, -73.983, 0.04)

    await controller.start_session("Morning run")
    assert controller.is_active
    sessions.create_session.assert_awaited_once_with("Morning run")

    state = await controller.handle_position(Position(lat=40.7585, lng=-73.9855))
    assert state.visited_ids() == {"way/10"}
    assert state.target.id == "way/20"

    await controller.handle_position(Position(lat=40.7625, lng=-73.9795))
    assert sessions.record_position.await_count == 2

    stats = await controller.stop_session()
    assert not controller.is_active
    assert stats.distance_km > 0.5
    session_id, distance_km = sessions.end_session.await_args.args
    assert session_id == "abc123"
    assert distance_km == round(stats.distance_km, 3)


@pytest.mark.asyncio
async def test_first_position_loads_area_around_driver() -> None:
    network = FakeNetworkClient([_osm_response()])
    controller = _controller(network_client=network)
    await controller.start_session("Run")

    state = await controller.handle_position(Position(lat=40.7585, lng=-73.9855))

    assert len(network.requests) == 1
    assert network.requests[0].contains(40.7585, -73.9855)
    assert state.visited_ids() == {"way/10"}
    assert state.target.id == "way/20"

    await controller.handle_position(Position(lat=40.7625, lng=-73.9795))
    assert len(network.requests) == 1


@pytest.mark.asyncio
async def test_leaving_loaded_area_loads_a_new_one() -> None:
    network = FakeNetworkClient([_osm_response(), _osm_response(offset=1.0)])
    controller = _controller(network_client=network)
    await controller.start_session("Run", position=Position(lat=40.76, lng=-73.983))
    assert len(network.requests) == 1

    state = await controller.handle_position(Position(lat=41.7585, lng=-73.9855))

    assert len(network.requests) == 2
    assert controller.area.contains(41.7585, -73.9855)
    assert state.visited_ids() == {"way/10"}
    assert state.segments[0].coordinates[0] == (-73.986, 41.758)


@pytest.mark.asyncio
async def test_area_load_failure_keeps_session_running(caplog) -> None:
    class FailingClient:
        async def fetch_network(self, bbox):
            msg = "Overpass request failed: connection refused"
            raise ExternalServiceError(msg)

    sessions = FakeSessions()
    controller = _controller(network_client=FailingClient(), sessions=sessions)
    await controller.start_session("Run")

    state = await controller.handle_position(Position(lat=40.7585, lng=-73.9855))

    assert state is not None
    assert state.total_count == 0
    assert controller.area is None
    sessions.record_position.assert_awaited_once()
    assert controller.accumulator.get_stats().points_recorded == 1
    assert "Failed to load area" in caplog.text

@pytest.mark.asyncio
async def test_positions_are_ignored_without_session() -> None:
    sessions = FakeSessions()
    controller = _controller(sessions=sessions)
    await controller.load_area_around(40.76, -73.983, 0.04)

    state = await controller.handle_position(Position(lat=40.7585, lng=-73.9855))

    assert state is None
    sessions.record_position.assert_not_awaited()
    assert controller.tracker.get_state().visited_count == 0


@pytest.mark.asyncio
async def test_invalid_sample_is_dropped(caplog) -> None:
    sessions = FakeSessions()
    controller = _controller(sessions=sessions)
    await controller.start_session()

    state = await controller.handle_position(Position(lat=200.0, lng=0.0))

    assert state is None
    sessions.record_position.assert_not_awaited()
    assert controller.accumulator.get_stats().points_recorded == 0
    assert "Discarding position sample" in caplog.text


@pytest.mark.asyncio
async def test_default_session_name_is_timestamped() -> None:
    sessions = FakeSessions()
    controller = _controller(sessions=sessions)

    await controller.start_session()

    (name,) = sessions.create_session.await_args.args
    assert name.startswith("Drive - ")


@pytest.mark.asyncio
async def test_breadcrumb_failure_does_not_stop_tracking() -> None:
    sessions = FakeSessions()
    sessions.record_position.side_effect = RuntimeError("mongo down")
    controller = _controller(sessions=sessions)
    await controller.load_area_around(40.76, -73.983, 0.04)
    await controller.start_session("Run")

    state = await controller.handle_position(Position(lat=40.7585, lng=-73.9855))

    assert state.visited_ids() == {"way/10"}


@pytest.mark.asyncio
async def test_directions_route_to_target_start() -> None:
    directions = AsyncMock()
    directions.directions.return_value = Directions(distance=10.0, duration=5.0, steps=[])
    controller = _controller(directions_client=directions)
    await controller.load_area_around(40.76, -73.983, 0.04)
    await controller.start_session("Run")
    await controller.handle_position(Position(lat=40.7585, lng=-73.9855))

    result = await controller.directions_to_target(Position(lat=40.7585, lng=-73.9855))

    assert result.distance == 10.0
    directions.directions.assert_awaited_once_with(40.7585, -73.9855, 40.762, -73.98)


@pytest.mark.asyncio
async def test_directions_without_target_returns_none() -> None:
    directions = AsyncMock()
    controller = _controller(directions_client=directions)

    assert await controller.directions_to_target(Position(lat=1.0, lng=1.0)) is None
    directions.directions.assert_not_awaited()

    with pytest.raises(InvalidPosition):
        await controller.directions_to_target(Position(lat=91.0, lng=1.0))
