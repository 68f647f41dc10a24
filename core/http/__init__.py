"""HTTP clients for the street-network and directions providers."""

from core.http.blocklist import PUBLIC_PROVIDER_HOSTS, is_forbidden_host
from core.http.osrm import OsrmClient
from core.http.overpass import OverpassClient
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import cleanup_session, get_session

__all__ = [
    "PUBLIC_PROVIDER_HOSTS",
    "OsrmClient",
    "OverpassClient",
    "cleanup_session",
    "get_session",
    "is_forbidden_host",
    "request_json",
    "retry_async",
]
