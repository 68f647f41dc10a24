import os
from unittest.mock import patch

import config


def test_defaults_without_environment() -> None:
    with patch.dict(os.environ, {}, clear=True):
        assert config.get_visit_threshold_meters() == 20.0
        assert config.get_area_offset_degrees() == 0.04
        assert config.get_spatial_index_min_segments() == 500
        assert config.get_overpass_url() == "https://overpass-api.de/api/interpreter"
        assert config.get_osrm_url() == "https://router.project-osrm.org"
        assert config.get_blocked_hosts() == set()
        assert config.get_cors_origins() == []


def test_environment_overrides() -> None:
    env = {
        "VISIT_THRESHOLD_METERS": "15.5",
        "AREA_OFFSET_DEGREES": "0.02",
        "SPATIAL_INDEX_MIN_SEGMENTS": "100",
        "OVERPASS_URL": "http://overpass.local/api/interpreter",
        "OSRM_URL": "http://osrm.local/",
        "BLOCKED_HOSTS": "Overpass-API.de, ,router.project-osrm.org",
        "CORS_ALLOWED_ORIGINS": "http://localhost:3000, https://sweep.example",
    }
    with patch.dict(os.environ, env, clear=True):
        assert config.get_visit_threshold_meters() == 15.5
        assert config.get_area_offset_degrees() == 0.02
        assert config.get_spatial_index_min_segments() == 100
        assert config.get_overpass_url() == "http://overpass.local/api/interpreter"
        assert config.get_osrm_url() == "http://osrm.local"
        assert config.get_blocked_hosts() == {
            "overpass-api.de",
            "router.project-osrm.org",
        }
        assert config.get_cors_origins() == [
            "http://localhost:3000",
            "https://sweep.example",
        ]


def test_invalid_values_fall_back_to_defaults() -> None:
    env = {
        "VISIT_THRESHOLD_METERS": "wide",
        "AREA_OFFSET_DEGREES": "-1",
        "SPATIAL_INDEX_MIN_SEGMENTS": "many",
    }
    with patch.dict(os.environ, env, clear=True):
        assert config.get_visit_threshold_meters() == 20.0
        assert config.get_area_offset_degrees() == 0.04
        assert config.get_spatial_index_min_segments() == 500
