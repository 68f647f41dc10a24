"""
Street network ingestion.

Turns a raw street-network response into the coverage-trackable segment
set for one area. Pure transformation: the fetch happens in the
provider client and persistence never sees segments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from config import get_area_offset_degrees
from core.exceptions import ValidationError
from core.spatial import GeometryService, is_valid_geojson_line
from street_coverage.models import StreetSegment
from street_coverage.osm_geojson import osm_to_features
from street_coverage.road_filter import (
    REASON_NOT_LINE,
    RoadDecision,
    RoadFilterAudit,
    classify_highway,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Area to fetch, in degrees."""

    north: float
    south: float
    east: float
    west: float

    def to_overpass(self) -> str:
        """Overpass ``(south,west,north,east)`` filter body."""
        return f"{self.south},{self.west},{self.north},{self.east}"

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def to_dict(self) -> dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }


def area_bounding_box(
    lat: float,
    lng: float,
    offset_degrees: float | None = None,
) -> BoundingBox:
    """Square area centred on a position, clipped to WGS84 bounds."""
    if not GeometryService.is_valid_lat_lng(lat, lng):
        msg = f"Cannot build an area around invalid position ({lat}, {lng})."
        raise ValidationError(msg, {"lat": lat, "lng": lng})
    offset = get_area_offset_degrees() if offset_degrees is None else offset_degrees
    if offset <= 0:
        msg = "Area offset must be positive."
        raise ValidationError(msg, {"offset_degrees": offset})
    return BoundingBox(
        north=min(90.0, lat + offset),
        south=max(-90.0, lat - offset),
        east=min(180.0, lng + offset),
        west=max(-180.0, lng - offset),
    )


def validate_bounding_box(bbox: BoundingBox) -> BoundingBox:
    if not GeometryService.validate_bounding_box(
        bbox.south,
        bbox.west,
        bbox.north,
        bbox.east,
    ):
        msg = "Bounding box must have south < north and west < east within WGS84."
        raise ValidationError(msg, bbox.to_dict())
    return bbox


def _feature_decision(feature: dict[str, Any]) -> RoadDecision:
    if not is_valid_geojson_line(feature.get("geometry")):
        return RoadDecision(include=False, reason_code=REASON_NOT_LINE)
    return classify_highway(feature.get("properties"))


def features_to_segments(
    features: list[dict[str, Any]],
    audit: RoadFilterAudit | None = None,
) -> list[StreetSegment]:
    """Keep driveable LineString features, one unvisited segment each."""
    segments: list[StreetSegment] = []
    seen: set[str] = set()
    for feature in features:
        decision = _feature_decision(feature)
        fid = feature.get("id")
        if audit is not None:
            audit.record(decision, feature_id=fid)
        if not decision.include or fid is None:
            continue

        segment_id = str(fid)
        if segment_id in seen:
            logger.debug("Dropping duplicate feature %s", segment_id)
            continue
        seen.add(segment_id)

        coords = tuple(
            (float(coord[0]), float(coord[1]))
            for coord in feature["geometry"]["coordinates"]
        )
        segments.append(
            StreetSegment(
                id=segment_id,
                coordinates=coords,
                properties=dict(feature.get("properties") or {}),
            ),
        )
    return segments


def parse_osm_data(osm_data: Any) -> list[StreetSegment]:
    """
    Convert a raw street-network response into street segments.

    Only ways whose ``highway`` tag is in the driveable allow-list and
    whose geometry is a line of at least two coordinates are kept. An
    area without matching ways yields an empty list.
    """
    features = osm_to_features(osm_data)
    audit = RoadFilterAudit()
    segments = features_to_segments(features, audit)
    logger.info(
        "Ingested %d street segments (%d features excluded: %s)",
        len(segments),
        audit.excluded_count,
        audit.excluded_by_reason,
    )
    return segments
