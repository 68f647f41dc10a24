"""
Overpass JSON to GeoJSON conversion.

Overpass returns topology: ways reference node ids and the node
coordinates arrive as separate elements. Coverage matching needs linear
geometry, so every way is resolved into a GeoJSON feature here before
road filtering happens.
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import ValidationError
from core.spatial import GeometryService

logger = logging.getLogger(__name__)

# Closed ways with these keys describe areas, not lines.
POLYGON_KEYS = frozenset(
    {
        "amenity",
        "building",
        "landuse",
        "leisure",
        "natural",
        "place",
        "shop",
        "tourism",
    },
)
# highway values that are areas when the way is closed.
POLYGON_HIGHWAY_VALUES = frozenset({"services", "rest_area", "escape", "elevator"})


def feature_id(element_type: str, osm_id: Any) -> str:
    return f"{element_type}/{osm_id}"


def _elements(osm_data: Any) -> list[dict[str, Any]]:
    if not isinstance(osm_data, dict):
        msg = "Street network response must be a JSON object."
        raise ValidationError(msg)
    elements = osm_data.get("elements")
    if not isinstance(elements, list):
        msg = "Street network response has no 'elements' list."
        raise ValidationError(msg)
    return [item for item in elements if isinstance(item, dict)]


def _node_index(elements: list[dict[str, Any]]) -> dict[Any, tuple[float, float]]:
    nodes: dict[Any, tuple[float, float]] = {}
    for element in elements:
        if element.get("type") != "node":
            continue
        lat = element.get("lat")
        lon = element.get("lon")
        if not GeometryService.is_valid_lat_lng(lat, lon):
            continue
        nodes[element.get("id")] = (float(lon), float(lat))
    return nodes


def _way_coordinates(
    way: dict[str, Any],
    nodes: dict[Any, tuple[float, float]],
) -> list[tuple[float, float]]:
    # "out geom" responses inline the geometry on the way itself.
    inline = way.get("geometry")
    if isinstance(inline, list) and inline:
        coords: list[tuple[float, float]] = []
        for point in inline:
            if not isinstance(point, dict):
                continue
            lat, lon = point.get("lat"), point.get("lon")
            if GeometryService.is_valid_lat_lng(lat, lon):
                coords.append((float(lon), float(lat)))
        return coords

    refs = way.get("nodes")
    if not isinstance(refs, list):
        return []
    return [nodes[ref] for ref in refs if ref in nodes]


def _is_area(way: dict[str, Any], tags: dict[str, Any]) -> bool:
    refs = way.get("nodes") or []
    closed = len(refs) >= 4 and refs[0] == refs[-1]
    if not closed:
        return False
    area = str(tags.get("area", "")).strip().lower()
    if area == "no":
        return False
    if area == "yes":
        return True
    if str(tags.get("highway", "")).strip().lower() in POLYGON_HIGHWAY_VALUES:
        return True
    return any(key in tags for key in POLYGON_KEYS)


def _way_feature(
    way: dict[str, Any],
    nodes: dict[Any, tuple[float, float]],
) -> dict[str, Any] | None:
    fid = feature_id("way", way.get("id"))
    tags = way.get("tags") if isinstance(way.get("tags"), dict) else {}
    coords = _way_coordinates(way, nodes)
    if len(coords) < 2:
        logger.debug("Skipping %s: %d resolvable coordinates", fid, len(coords))
        return None

    if _is_area(way, tags):
        geometry = {
            "type": "Polygon",
            "coordinates": [[list(coord) for coord in coords]],
        }
    else:
        geometry = {
            "type": "LineString",
            "coordinates": [list(coord) for coord in coords],
        }

    properties = dict(tags)
    properties["@id"] = fid
    return GeometryService.feature_from_geometry(geometry, properties, feature_id=fid)


def osm_to_features(osm_data: Any) -> list[dict[str, Any]]:
    """
    Convert an Overpass JSON response into GeoJSON features.

    Ways become LineStrings (or Polygons when closed and area-like) with
    their node references resolved; missing node references are skipped.
    Tagged nodes become Points. Relations are not expanded.
    """
    elements = _elements(osm_data)
    nodes = _node_index(elements)

    features: list[dict[str, Any]] = []
    skipped_relations = 0
    for element in elements:
        element_type = element.get("type")
        if element_type == "way":
            feature = _way_feature(element, nodes)
            if feature is not None:
                features.append(feature)
        elif element_type == "node":
            tags = element.get("tags")
            coord = nodes.get(element.get("id"))
            if not tags or coord is None:
                continue
            fid = feature_id("node", element.get("id"))
            properties = dict(tags)
            properties["@id"] = fid
            features.append(
                GeometryService.feature_from_geometry(
                    {"type": "Point", "coordinates": list(coord)},
                    properties,
                    feature_id=fid,
                ),
            )
        elif element_type == "relation":
            skipped_relations += 1

    if skipped_relations:
        logger.debug("Ignored %d relation elements", skipped_relations)
    return features
