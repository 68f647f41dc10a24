"""
Drive orchestration.

Feeds one position stream into the coverage tracker, the session
accumulator and the breadcrumb log, and fetches street networks and
directions through the provider clients. The first fix of a session, and
any fix outside the loaded box, triggers a fresh area load around it.
Provider I/O always completes before the tracker is touched, so no lock
is held across an await.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from core.exceptions import InvalidPosition, StreetSweepError
from core.http.osrm import OsrmClient
from core.http.overpass import OverpassClient
from street_coverage.ingestion import BoundingBox, area_bounding_box, parse_osm_data
from street_coverage.tracker import CoverageTracker, validate_position
from tracking.services.session_service import SessionService
from tracking.trip_stats import SessionAccumulator, TripStats

if TYPE_CHECKING:
    from core.http.osrm import Directions
    from db.models import DriveSession
    from street_coverage.models import CoverageState, Position

logger = logging.getLogger(__name__)


class DriveController:
    """One driver's live session: coverage, distance and breadcrumbs."""

    def __init__(
        self,
        *,
        tracker: CoverageTracker | None = None,
        accumulator: SessionAccumulator | None = None,
        network_client: Any | None = None,
        directions_client: Any | None = None,
        sessions: Any = SessionService,
    ) -> None:
        self.tracker = tracker or CoverageTracker()
        self.accumulator = accumulator or SessionAccumulator()
        self._network = network_client or OverpassClient()
        self._directions = directions_client or OsrmClient()
        self._sessions = sessions
        self._area_generation = 0
        self._loads_in_flight = 0
        self.area: BoundingBox | None = None
        self.session_id: str | None = None

    @property
    def is_active(self) -> bool:
        return self.session_id is not None

    def needs_area(self, position: Position) -> bool:
        """True when no area is loaded or ``position`` lies outside it."""
        return self.area is None or not self.area.contains(position.lat, position.lng)

    async def load_area_around(
        self,
        lat: float,
        lng: float,
        offset_degrees: float | None = None,
    ) -> CoverageState | None:
        """
        Fetch, ingest and load the street network around a position.

        Returns None when a newer load was requested while this one was
        in flight; the stale result is discarded.
        """
        self._area_generation += 1
        generation = self._area_generation
        bbox = area_bounding_box(lat, lng, offset_degrees)

        self._loads_in_flight += 1
        try:
            raw = await self._network.fetch_network(bbox)
        finally:
            self._loads_in_flight -= 1
        segments = parse_osm_data(raw)

        if generation != self._area_generation:
            logger.info(
                "Discarding stale area load %d (latest is %d)",
                generation,
                self._area_generation,
            )
            return None

        self.tracker.load_area(segments)
        self.area = bbox
        return self.tracker.get_state()

    async def _ensure_area(self, position: Position) -> None:
        if self._loads_in_flight or not self.needs_area(position):
            return
        try:
            await self.load_area_around(position.lat, position.lng)
        except StreetSweepError:
            logger.exception(
                "Failed to load area around %.5f, %.5f",
                position.lat,
                position.lng,
            )

    async def start_session(
        self,
        name: str | None = None,
        position: Position | None = None,
    ) -> DriveSession:
        if self.is_active:
            await self.stop_session()
        session_name = name or f"Drive - {datetime.now(UTC):%Y-%m-%d %H:%M}"
        session = await self._sessions.create_session(session_name)
        self.session_id = str(session.id)
        self.accumulator.start()
        logger.info("Started drive session %s", self.session_id)
        if position is not None:
            try:
                validate_position(position)
            except InvalidPosition as exc:
                logger.warning("Ignoring start position: %s", exc.message)
            else:
                await self._ensure_area(position)
        return session

    async def handle_position(self, position: Position) -> CoverageState | None:
        """
        Process one position sample while a session is active.

        Invalid samples are logged and dropped; the caller waits for the
        next one. Returns the coverage state after the update, or None
        when the sample was ignored.
        """
        if not self.is_active:
            return None
        try:
            validate_position(position)
        except InvalidPosition as exc:
            logger.warning("Discarding position sample: %s", exc.message)
            return None

        await self._ensure_area(position)

        try:
            await self._sessions.record_position(self.session_id, position)
        except Exception:
            logger.exception("Failed to persist breadcrumb for %s", self.session_id)

        self.accumulator.record_position(position)
        self.tracker.update_position(position)
        return self.tracker.get_state()

    async def stop_session(self) -> TripStats:
        stats = self.accumulator.stop()
        session_id = self.session_id
        self.session_id = None
        if session_id is not None:
            await self._sessions.end_session(session_id, round(stats.distance_km, 3))
        return stats

    async def directions_to_target(self, position: Position) -> Directions | None:
        """Directions from ``position`` to the start of the current target."""
        validate_position(position)
        target = self.tracker.get_state().target
        if target is None:
            return None
        logger.debug(
            "Routing to %s (%s)",
            target.name or "unnamed street",
            target.id,
        )
        end_lng, end_lat = target.start
        return await self._directions.directions(
            position.lat,
            position.lng,
            end_lat,
            end_lng,
        )
