"""
Spatial prefilter for visit detection.

An STRtree over segment bounding boxes narrows the per-update scan to
segments whose envelope can possibly lie within the visit threshold. The
precise great-circle test still decides every visit, so the outcome
matches a full scan. Long edges are densified along their great circle
before indexing; a straight lon/lat chord can sit well away from the arc
the distance test measures against.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from shapely.geometry import LineString, box
from shapely.strtree import STRtree

from core.spatial import GeometryService
from street_coverage.constants import (
    INDEX_ENVELOPE_SAFETY,
    INDEX_MAX_EDGE_METERS,
    INDEX_MIN_COS_LAT,
    INDEX_MIN_PAD_METERS,
    METERS_PER_DEGREE_LAT,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from street_coverage.models import Position, StreetSegment

logger = logging.getLogger(__name__)


def densify_line(
    coordinates: Sequence[tuple[float, float]],
    max_edge_meters: float = INDEX_MAX_EDGE_METERS,
) -> list[tuple[float, float]]:
    """Insert great-circle points so no edge is longer than ``max_edge_meters``."""
    dense = [tuple(coordinates[0])]
    for (lon1, lat1), (lon2, lat2) in zip(coordinates, coordinates[1:]):
        length = GeometryService.haversine_distance(lon1, lat1, lon2, lat2)
        pieces = math.ceil(length / max_edge_meters)
        for step in range(1, pieces):
            dense.append(
                GeometryService.intermediate_point(
                    lon1,
                    lat1,
                    lon2,
                    lat2,
                    step / pieces,
                ),
            )
        dense.append((lon2, lat2))
    return dense


class SegmentIndex:
    """Pre-built STRtree over one area's segment geometries."""

    def __init__(self, segments: Sequence[StreetSegment]) -> None:
        self.size = len(segments)
        self.strtree: STRtree | None = None
        if not segments:
            return
        geoms = [LineString(densify_line(seg.coordinates)) for seg in segments]
        self.strtree = STRtree(geoms)
        logger.debug("Built spatial index with %d segments", self.size)

    def candidates(
        self,
        point: Position,
        radius_meters: float,
    ) -> list[int] | None:
        """
        Indices of segments whose envelope is near ``point``, in load order.

        Returns None when the envelope cannot be expressed as a single
        lon/lat box (near the poles or across the antimeridian); callers
        must then scan every segment.
        """
        if self.strtree is None:
            return []

        cos_lat = math.cos(math.radians(point.lat))
        if cos_lat < INDEX_MIN_COS_LAT:
            return None

        pad_meters = radius_meters * INDEX_ENVELOPE_SAFETY + INDEX_MIN_PAD_METERS
        pad_lat = pad_meters / METERS_PER_DEGREE_LAT
        pad_lng = pad_lat / cos_lat
        west = point.lng - pad_lng
        east = point.lng + pad_lng
        if west < -180.0 or east > 180.0:
            return None

        envelope = box(west, point.lat - pad_lat, east, point.lat + pad_lat)
        hits = self.strtree.query(envelope)
        return sorted(int(idx) for idx in hits)
