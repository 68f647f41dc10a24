"""API routes proxying the street-network and directions providers."""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from core.api import api_route
from core.http.osrm import Directions, OsrmClient
from core.http.overpass import OverpassClient
from core.spatial import GeometryService
from street_coverage.ingestion import BoundingBox, parse_osm_data, validate_bounding_box

logger = logging.getLogger(__name__)
router = APIRouter()


class BoundingBoxRequest(BaseModel):
    north: float
    south: float
    east: float
    west: float

    def to_bbox(self) -> BoundingBox:
        return validate_bounding_box(
            BoundingBox(
                north=self.north,
                south=self.south,
                east=self.east,
                west=self.west,
            ),
        )


class DirectionsRequest(BaseModel):
    startLat: float
    startLng: float
    endLat: float
    endLng: float


@router.post("/api/osm/data")
@api_route(logger)
async def osm_data(payload: BoundingBoxRequest) -> dict[str, Any]:
    """Raw Overpass JSON for the driveable ways inside the box."""
    return await OverpassClient().fetch_network(payload.to_bbox())


@router.post("/api/osm/segments")
@api_route(logger)
async def osm_segments(payload: BoundingBoxRequest) -> dict[str, Any]:
    """Coverage-trackable street segments inside the box as GeoJSON."""
    raw = await OverpassClient().fetch_network(payload.to_bbox())
    segments = parse_osm_data(raw)
    return GeometryService.feature_collection([seg.to_feature() for seg in segments])


@router.post("/api/directions")
@api_route(logger)
async def directions(payload: DirectionsRequest) -> Directions:
    return await OsrmClient().directions(
        payload.startLat,
        payload.startLng,
        payload.endLat,
        payload.endLng,
    )
