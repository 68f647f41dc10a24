"""
Fixed coverage constants.

The road-class allow-list is fixed; the visit threshold default lives in
``config`` so deployments can tune it for their GPS accuracy.
"""

# =============================================================================
# Road Classification (FIXED)
# =============================================================================
# OSM highway values a car can drive and that count toward coverage.
DRIVEABLE_HIGHWAY_TYPES = frozenset(
    {
        "motorway",
        "trunk",
        "primary",
        "secondary",
        "tertiary",
        "unclassified",
        "residential",
        "living_street",
    },
)

# Excluded at the provider query so the response stays small.
EXCLUDED_QUERY_HIGHWAY_TYPES = (
    "footway",
    "cycleway",
    "path",
    "steps",
    "pedestrian",
    "track",
    "service",
)

# =============================================================================
# Spatial Index
# =============================================================================
# Degrees of latitude per meter on the EARTH_RADIUS_M sphere is
# 1 / 111194.93; the envelope pad is widened so the index never drops a
# segment the full scan would have matched.
METERS_PER_DEGREE_LAT = 111194.92664455873
INDEX_ENVELOPE_SAFETY = 1.5
# Absolute envelope pad so a zero threshold still finds touching segments.
INDEX_MIN_PAD_METERS = 5.0
# Edges longer than this are densified along the great circle before
# indexing so the lon/lat chord stays within centimetres of the arc.
INDEX_MAX_EDGE_METERS = 1000.0
# Below this |cos(lat)| the longitude envelope explodes; use the full scan.
INDEX_MIN_COS_LAT = 0.05
