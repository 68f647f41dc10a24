"""Per-session trip statistics integrated from the position stream."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from core.constants import METERS_PER_KM
from core.spatial import GeometryService
from street_coverage.models import Position
from street_coverage.tracker import validate_position

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TripStats:
    """Snapshot of one session's accumulated statistics."""

    distance_meters: float = 0.0
    anchor: Position | None = None
    points_recorded: int = 0
    active: bool = False
    started_at: datetime | None = None
    ended_at: datetime | None = None

    @property
    def distance_km(self) -> float:
        return self.distance_meters / METERS_PER_KM

    def to_dict(self) -> dict[str, object]:
        return {
            "distance_km": round(self.distance_km, 3),
            "points_recorded": self.points_recorded,
            "active": self.active,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }


class SessionAccumulator:
    """Cumulative distance driven during one tracking session."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._stats = TripStats()

    def start(self) -> None:
        with self._lock:
            self._stats = TripStats(active=True, started_at=datetime.now(UTC))

    def record_position(self, point: Position) -> None:
        """
        Add the great-circle hop from the previous anchor to ``point``.

        No-op while no session is active. Invalid positions raise
        InvalidPosition and leave the statistics untouched.
        """
        validate_position(point)
        with self._lock:
            stats = self._stats
            if not stats.active:
                return
            hop = 0.0
            if stats.anchor is not None:
                hop = GeometryService.haversine_distance(
                    stats.anchor.lng,
                    stats.anchor.lat,
                    point.lng,
                    point.lat,
                )
            self._stats = replace(
                stats,
                distance_meters=stats.distance_meters + hop,
                anchor=point,
                points_recorded=stats.points_recorded + 1,
            )

    def stop(self) -> TripStats:
        with self._lock:
            if self._stats.active:
                self._stats = replace(
                    self._stats,
                    active=False,
                    ended_at=datetime.now(UTC),
                )
                logger.info(
                    "Session ended after %.2f km (%d points)",
                    self._stats.distance_km,
                    self._stats.points_recorded,
                )
            return self._stats

    def get_stats(self) -> TripStats:
        with self._lock:
            return self._stats
