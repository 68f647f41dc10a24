"""Coverage tracking data model.

Positions are immutable samples from the location source. Street segments
are owned by the coverage tracker, which is the only component allowed to
flip ``visited``; everyone else receives copies inside a ``CoverageState``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from core.spatial import GeometryService


@dataclass(frozen=True, slots=True)
class Position:
    """A single location sample (WGS84 degrees)."""

    lat: float
    lng: float
    accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def is_valid(self) -> bool:
        return GeometryService.is_valid_lat_lng(self.lat, self.lng)


@dataclass(slots=True)
class StreetSegment:
    """
    One traversable road element of a loaded area.

    ``coordinates`` are GeoJSON-ordered ``(lng, lat)`` pairs. ``id`` is the
    source feature id (``way/<osm id>``) so the same area ingested twice
    yields the same identities.
    """

    id: str
    coordinates: tuple[tuple[float, float], ...]
    properties: dict[str, Any] = field(default_factory=dict)
    visited: bool = False

    @property
    def name(self) -> str | None:
        value = self.properties.get("name")
        return str(value) if value is not None else None

    @property
    def geometry(self) -> dict[str, Any]:
        return {
            "type": "LineString",
            "coordinates": [list(coord) for coord in self.coordinates],
        }

    @property
    def start(self) -> tuple[float, float]:
        return self.coordinates[0]

    def mark_visited(self) -> bool:
        """Flip to visited. Returns True only on the false -> true transition."""
        if self.visited:
            return False
        self.visited = True
        return True

    def copy(self) -> StreetSegment:
        return replace(self, properties=dict(self.properties))

    def to_feature(self) -> dict[str, Any]:
        properties = dict(self.properties)
        properties["visited"] = self.visited
        return GeometryService.feature_from_geometry(
            self.geometry,
            properties,
            feature_id=self.id,
        )


@dataclass(frozen=True, slots=True)
class CoverageState:
    """Read-only snapshot of a loaded area's coverage."""

    segments: tuple[StreetSegment, ...] = ()
    target: StreetSegment | None = None

    @property
    def total_count(self) -> int:
        return len(self.segments)

    @property
    def visited_count(self) -> int:
        return sum(1 for seg in self.segments if seg.visited)

    @property
    def unvisited_count(self) -> int:
        return self.total_count - self.visited_count

    @property
    def coverage_percent(self) -> float:
        if not self.segments:
            return 0.0
        return self.visited_count / self.total_count * 100.0

    @property
    def is_complete(self) -> bool:
        return bool(self.segments) and self.unvisited_count == 0

    def visited_ids(self) -> set[str]:
        return {seg.id for seg in self.segments if seg.visited}

    def to_feature_collection(self) -> dict[str, Any]:
        return GeometryService.feature_collection(
            [seg.to_feature() for seg in self.segments],
        )

    def summary(self) -> dict[str, Any]:
        return {
            "total_streets": self.total_count,
            "visited_streets": self.visited_count,
            "coverage_percent": round(self.coverage_percent, 2),
            "target_id": self.target.id if self.target else None,
            "target_name": self.target.name if self.target else None,
        }
