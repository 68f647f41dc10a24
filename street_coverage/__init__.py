"""Street coverage package.

Ingests a street network for the area around the driver and tracks which
street segments have been driven during a session.

Key modules:
    - models: Position, StreetSegment, CoverageState
    - ingestion: raw street-network response to street segments
    - road_filter: driveable road-class allow-list
    - proximity: point-to-street distance
    - tracker: visit marking and nearest-unvisited target selection
    - api: street-network and directions routes
"""
