"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import constants from here rather than calling os.getenv directly
in multiple places.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)


def _get_float_env(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default
    if value <= minimum:
        logger.warning("Ignoring out-of-range %s=%r; using %s", name, raw, default)
        return default
    return value


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(int(raw), 1)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


# --- MongoDB (breadcrumb persistence) ---
MONGODB_URI: Final[str] = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE: Final[str] = os.getenv("MONGODB_DATABASE", "streetsweep")

# --- Street-network provider (Overpass) ---
DEFAULT_OVERPASS_URL: Final[str] = "https://overpass-api.de/api/interpreter"
OVERPASS_TIMEOUT_SECONDS: Final[int] = 25

# --- Directions provider (OSRM) ---
DEFAULT_OSRM_URL: Final[str] = "https://router.project-osrm.org"

# --- Coverage tracking ---
DEFAULT_VISIT_THRESHOLD_METERS: Final[float] = 20.0
DEFAULT_AREA_OFFSET_DEGREES: Final[float] = 0.04
DEFAULT_SPATIAL_INDEX_MIN_SEGMENTS: Final[int] = 500


def get_overpass_url() -> str:
    return os.getenv("OVERPASS_URL", "").strip() or DEFAULT_OVERPASS_URL


def get_osrm_url() -> str:
    return (os.getenv("OSRM_URL", "").strip() or DEFAULT_OSRM_URL).rstrip("/")


def get_visit_threshold_meters() -> float:
    """GPS accuracy envelope used to decide that a street was driven."""
    return _get_float_env("VISIT_THRESHOLD_METERS", DEFAULT_VISIT_THRESHOLD_METERS)


def get_area_offset_degrees() -> float:
    """Half-width, in degrees, of the square area loaded around the driver."""
    return _get_float_env("AREA_OFFSET_DEGREES", DEFAULT_AREA_OFFSET_DEGREES)


def get_spatial_index_min_segments() -> int:
    return _get_int_env(
        "SPATIAL_INDEX_MIN_SEGMENTS",
        DEFAULT_SPATIAL_INDEX_MIN_SEGMENTS,
    )


def get_blocked_hosts() -> set[str]:
    """Hosts that outbound HTTP clients must never contact."""
    raw = os.getenv("BLOCKED_HOSTS", "")
    return {host.strip().lower() for host in raw.split(",") if host.strip()}


def get_cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


__all__ = [
    "DEFAULT_AREA_OFFSET_DEGREES",
    "DEFAULT_OSRM_URL",
    "DEFAULT_OVERPASS_URL",
    "DEFAULT_SPATIAL_INDEX_MIN_SEGMENTS",
    "DEFAULT_VISIT_THRESHOLD_METERS",
    "MONGODB_DATABASE",
    "MONGODB_URI",
    "OVERPASS_TIMEOUT_SECONDS",
    "get_area_offset_degrees",
    "get_blocked_hosts",
    "get_cors_origins",
    "get_osrm_url",
    "get_overpass_url",
    "get_spatial_index_min_segments",
    "get_visit_threshold_meters",
]
