"""
OSRM HTTP client.

Turn-by-turn directions from the driver to the selected target street.
Only the summary and the step list are kept; the coverage core never
inspects route geometry.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from config import get_osrm_url
from core.exceptions import ExternalServiceError, ValidationError
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session
from core.spatial import GeometryService

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTION = "Continue"
UNNAMED_ROAD = "Unnamed road"


class DirectionStep(BaseModel):
    distance: float
    duration: float
    instruction: str
    name: str | None = None


class Directions(BaseModel):
    distance: float
    duration: float
    steps: list[DirectionStep]


def _describe_maneuver(maneuver: dict[str, Any], road: str | None) -> str:
    """Human-readable instruction for an OSRM maneuver object."""
    if maneuver.get("instruction"):
        return str(maneuver["instruction"])

    kind = str(maneuver.get("type") or "").strip()
    modifier = str(maneuver.get("modifier") or "").strip()
    onto = f" onto {road}" if road else ""

    if kind == "depart":
        return f"Head out{onto}" if road else "Depart"
    if kind == "arrive":
        return "Arrive at your destination"
    if kind in {"roundabout", "rotary"}:
        exit_number = maneuver.get("exit")
        if exit_number:
            return f"Enter the roundabout and take exit {exit_number}{onto}"
        return f"Enter the roundabout{onto}"
    if kind in {"turn", "end of road", "fork", "on ramp", "off ramp", "merge"}:
        if modifier == "straight":
            return f"Continue straight{onto}"
        if modifier.startswith("slight"):
            return f"Bear {modifier.split(' ', 1)[-1]}{onto}"
        if modifier == "uturn":
            return f"Make a U-turn{onto}"
        if modifier:
            return f"Turn {modifier}{onto}"
    if kind == "new name" and road:
        return f"Continue onto {road}"
    return DEFAULT_INSTRUCTION


def normalize_route_response(data: dict[str, Any]) -> Directions:
    routes = data.get("routes")
    if data.get("code") not in (None, "Ok") or not routes:
        msg = "No route found"
        raise ValidationError(msg, {"code": data.get("code")})

    route = routes[0]
    steps: list[DirectionStep] = []
    for leg in route.get("legs") or []:
        for step in leg.get("steps") or []:
            road = str(step.get("name") or "").strip() or None
            steps.append(
                DirectionStep(
                    distance=float(step.get("distance") or 0.0),
                    duration=float(step.get("duration") or 0.0),
                    instruction=_describe_maneuver(step.get("maneuver") or {}, road),
                    name=road or UNNAMED_ROAD,
                ),
            )

    return Directions(
        distance=float(route.get("distance") or 0.0),
        duration=float(route.get("duration") or 0.0),
        steps=steps,
    )


class OsrmClient:
    def __init__(self, base_url: str | None = None, profile: str = "car") -> None:
        self._base_url = (base_url or get_osrm_url()).rstrip("/")
        self._profile = profile

    @retry_async()
    async def directions(
        self,
        start_lat: float,
        start_lng: float,
        end_lat: float,
        end_lng: float,
    ) -> Directions:
        for lat, lng in ((start_lat, start_lng), (end_lat, end_lng)):
            if not GeometryService.is_valid_lat_lng(lat, lng):
                msg = f"Invalid directions coordinate ({lat}, {lng})"
                raise ValidationError(msg, {"lat": lat, "lng": lng})

        url = (
            f"{self._base_url}/route/v1/{self._profile}/"
            f"{start_lng},{start_lat};{end_lng},{end_lat}"
        )
        session = await get_session()
        data = await request_json(
            "GET",
            url,
            session=session,
            params={"steps": "true", "geometries": "geojson", "overview": "full"},
            expected_status=(200, 400),
            service_name="OSRM route",
        )
        if not isinstance(data, dict):
            msg = "OSRM route error: unexpected response"
            raise ExternalServiceError(msg, {"url": url})
        directions = normalize_route_response(data)
        logger.debug(
            "Directions: %.0f m, %.0f s, %d steps",
            directions.distance,
            directions.duration,
            len(directions.steps),
        )
        return directions
