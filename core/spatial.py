"""
Spatial and geometry utilities.

Centralizes coordinate validation, great-circle distance calculations
and GeoJSON helpers. All distances are computed on a sphere of radius
``EARTH_RADIUS_M`` so that point-to-point and point-to-line results are
consistent with each other.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from core.constants import EARTH_RADIUS_M, METERS_PER_KM, METERS_TO_MILES

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    return max(-1.0, min(1.0, value))


class GeometryService:
    """Authoritative geometry operations for the application."""

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def is_valid_lat_lng(lat: Any, lng: Any) -> bool:
        """Return True when lat/lng are finite numbers inside WGS84 bounds."""
        if isinstance(lat, bool) or isinstance(lng, bool):
            return False
        try:
            lat_f = float(lat)
            lng_f = float(lng)
        except (TypeError, ValueError):
            return False
        if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
            return False
        return -90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0

    @staticmethod
    def validate_coordinate_pair(
        coord: Sequence[Any],
    ) -> tuple[bool, list[float] | None]:
        """Validate a [lon, lat] coordinate pair."""
        if not isinstance(coord, (list, tuple)) or len(coord) < 2:
            return False, None
        lon, lat = coord[0], coord[1]
        if not GeometryService.is_valid_lat_lng(lat, lon):
            return False, None
        return True, [float(lon), float(lat)]

    @staticmethod
    def validate_bounding_box(
        min_lat: float,
        min_lon: float,
        max_lat: float,
        max_lon: float,
    ) -> bool:
        """Validate bounding box coordinate ranges and ordering."""
        valid_min, _ = GeometryService.validate_coordinate_pair([min_lon, min_lat])
        valid_max, _ = GeometryService.validate_coordinate_pair([max_lon, max_lat])
        return valid_min and valid_max and min_lat < max_lat and min_lon < max_lon

    @staticmethod
    def haversine_distance(
        lon1: float,
        lat1: float,
        lon2: float,
        lat2: float,
        unit: str = "meters",
    ) -> float:
        """Calculate the great-circle distance using the Haversine formula."""
        distance_m = (
            _angular_distance(lon1, lat1, lon2, lat2) * GeometryService.EARTH_RADIUS_M
        )
        if unit == "meters":
            return distance_m
        if unit == "miles":
            return distance_m * METERS_TO_MILES
        if unit == "km":
            return distance_m / METERS_PER_KM
        msg = "Invalid unit. Use 'meters', 'miles', or 'km'."
        raise ValueError(msg)

    @staticmethod
    def initial_bearing(
        lon1: float,
        lat1: float,
        lon2: float,
        lat2: float,
    ) -> float:
        """Initial great-circle bearing from point 1 to point 2, in radians."""
        phi1 = math.radians(lat1)
        phi2 = math.radians(lat2)
        dlmb = math.radians(lon2 - lon1)
        y = math.sin(dlmb) * math.cos(phi2)
        x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(
            phi2,
        ) * math.cos(dlmb)
        return math.atan2(y, x)

    @staticmethod
    def intermediate_point(
        lon1: float,
        lat1: float,
        lon2: float,
        lat2: float,
        fraction: float,
    ) -> tuple[float, float]:
        """Point ``fraction`` of the way along the great circle, as (lon, lat)."""
        delta = _angular_distance(lon1, lat1, lon2, lat2)
        if delta == 0.0:
            return lon1, lat1
        phi1, lmb1 = math.radians(lat1), math.radians(lon1)
        phi2, lmb2 = math.radians(lat2), math.radians(lon2)
        a = math.sin((1.0 - fraction) * delta) / math.sin(delta)
        b = math.sin(fraction * delta) / math.sin(delta)
        x = a * math.cos(phi1) * math.cos(lmb1) + b * math.cos(phi2) * math.cos(lmb2)
        y = a * math.cos(phi1) * math.sin(lmb1) + b * math.cos(phi2) * math.sin(lmb2)
        z = a * math.sin(phi1) + b * math.sin(phi2)
        lat = math.degrees(math.atan2(z, math.hypot(x, y)))
        lon = math.degrees(math.atan2(y, x))
        return lon, lat

    @staticmethod
    def point_to_arc_distance(
        lon: float,
        lat: float,
        start: Sequence[float],
        end: Sequence[float],
    ) -> float:
        """
        Shortest distance in meters from a point to a great-circle arc.

        ``start`` and ``end`` are ``(lon, lat)`` pairs. When the point's
        projection falls before ``start`` or past ``end`` the distance to
        the nearer endpoint is returned; otherwise the absolute cross-track
        distance. A zero-length arc degrades to point-to-point distance.
        """
        lon1, lat1 = float(start[0]), float(start[1])
        lon2, lat2 = float(end[0]), float(end[1])
        radius = GeometryService.EARTH_RADIUS_M

        d13 = _angular_distance(lon1, lat1, lon, lat)
        if d13 == 0.0:
            return 0.0
        d12 = _angular_distance(lon1, lat1, lon2, lat2)
        if d12 == 0.0:
            return d13 * radius

        delta = GeometryService.initial_bearing(
            lon1,
            lat1,
            lon,
            lat,
        ) - GeometryService.initial_bearing(lon1, lat1, lon2, lat2)

        # Napier: tan(along) = tan(d13) * cos(delta)
        along = math.atan2(math.sin(d13) * math.cos(delta), math.cos(d13))
        if along <= 0.0:
            return d13 * radius
        if along >= d12:
            return _angular_distance(lon2, lat2, lon, lat) * radius

        cross = math.asin(_clamp_unit(math.sin(d13) * math.sin(delta)))
        return abs(cross) * radius

    @staticmethod
    def point_to_polyline_distance(
        lon: float,
        lat: float,
        coordinates: Sequence[Sequence[float]],
    ) -> float:
        """Minimum point-to-arc distance over consecutive coordinate pairs."""
        if len(coordinates) < 2:
            msg = "A polyline needs at least two coordinates."
            raise ValueError(msg)
        return min(
            GeometryService.point_to_arc_distance(
                lon,
                lat,
                coordinates[idx],
                coordinates[idx + 1],
            )
            for idx in range(len(coordinates) - 1)
        )

    @staticmethod
    def feature_from_geometry(
        geometry: dict[str, Any] | None,
        properties: dict[str, Any] | None = None,
        feature_id: str | None = None,
    ) -> dict[str, Any]:
        """Build a GeoJSON Feature from geometry and properties."""
        feature: dict[str, Any] = {
            "type": "Feature",
            "geometry": geometry,
            "properties": properties or {},
        }
        if feature_id is not None:
            feature["id"] = feature_id
        return feature

    @staticmethod
    def feature_collection(features: list[dict[str, Any]]) -> dict[str, Any]:
        """Build a GeoJSON FeatureCollection."""
        return {"type": "FeatureCollection", "features": features}


def _angular_distance(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Central angle between two lon/lat points, in radians."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(
        dlmb / 2,
    ) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def is_valid_geojson_line(geojson_data: Any) -> bool:
    """Validate a GeoJSON LineString with at least two in-range coordinates."""
    if not isinstance(geojson_data, dict):
        return False
    if geojson_data.get("type") != "LineString":
        return False
    coordinates = geojson_data.get("coordinates")
    if not isinstance(coordinates, list) or len(coordinates) < 2:
        logger.debug(
            "LineString must have at least 2 coordinate pairs. Found: %d",
            len(coordinates) if isinstance(coordinates, list) else 0,
        )
        return False
    for point in coordinates:
        is_valid, _ = GeometryService.validate_coordinate_pair(point)
        if not is_valid:
            logger.debug("LineString point out of WGS84 range: %s", point)
            return False
    return True
