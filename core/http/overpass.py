"""
Overpass HTTP client.

Fetches the raw driveable street network for a bounding box. The response
is handed untouched to ``street_coverage.ingestion.parse_osm_data``.
"""

from __future__ import annotations

import logging
from typing import Any

from config import OVERPASS_TIMEOUT_SECONDS, get_overpass_url
from core.exceptions import ExternalServiceError
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session
from street_coverage.constants import EXCLUDED_QUERY_HIGHWAY_TYPES
from street_coverage.ingestion import BoundingBox, validate_bounding_box

logger = logging.getLogger(__name__)


def build_network_query(
    bbox: BoundingBox,
    timeout_seconds: int = OVERPASS_TIMEOUT_SECONDS,
) -> str:
    """Overpass QL for highway ways in ``bbox`` plus their nodes."""
    excluded = "|".join(EXCLUDED_QUERY_HIGHWAY_TYPES)
    return (
        f"[out:json][timeout:{timeout_seconds}];\n"
        "(\n"
        f'  way["highway"]["highway"!~"{excluded}"]({bbox.to_overpass()});\n'
        ");\n"
        "out body;\n"
        ">;\n"
        "out skel qt;\n"
    )


class OverpassClient:
    def __init__(self, url: str | None = None) -> None:
        self._url = url or get_overpass_url()

    @retry_async()
    async def fetch_network(self, bbox: BoundingBox) -> dict[str, Any]:
        """Return the raw Overpass JSON for the driveable ways in ``bbox``."""
        validate_bounding_box(bbox)
        query = build_network_query(bbox)
        session = await get_session()
        data = await request_json(
            "POST",
            self._url,
            session=session,
            data={"data": query},
            service_name="Overpass",
        )
        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            msg = "Overpass error: unexpected response"
            raise ExternalServiceError(msg, {"url": self._url})

        remark = data.get("remark")
        if remark:
            # Overpass reports query timeouts as a remark on a 200 response.
            msg = f"Overpass error: {remark}"
            raise ExternalServiceError(msg, {"url": self._url})

        logger.info(
            "Fetched %d OSM elements for bbox %s",
            len(data["elements"]),
            bbox.to_overpass(),
        )
        return data
