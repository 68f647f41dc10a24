"""Point-to-street proximity in meters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from config import DEFAULT_VISIT_THRESHOLD_METERS
from core.exceptions import InvalidGeometry
from core.spatial import GeometryService

if TYPE_CHECKING:
    from street_coverage.models import Position, StreetSegment


def distance_to_segment(point: Position, segment: StreetSegment) -> float:
    """
    Shortest great-circle distance from ``point`` to the segment polyline.

    Raises:
        InvalidGeometry: the segment has fewer than two coordinates.
    """
    if len(segment.coordinates) < 2:
        msg = f"Segment {segment.id} has {len(segment.coordinates)} coordinates."
        raise InvalidGeometry(msg, {"segment_id": segment.id})
    return GeometryService.point_to_polyline_distance(
        point.lng,
        point.lat,
        segment.coordinates,
    )


def is_within_threshold(
    point: Position,
    segment: StreetSegment,
    threshold_meters: float = DEFAULT_VISIT_THRESHOLD_METERS,
) -> bool:
    return distance_to_segment(point, segment) <= threshold_meters
