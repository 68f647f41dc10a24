"""Outbound host blocking for HTTP clients."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

# Public provider endpoints; tests refuse to reach these.
PUBLIC_PROVIDER_HOSTS = frozenset(
    {
        "overpass-api.de",
        "overpass.kumi.systems",
        "router.project-osrm.org",
    },
)


def is_forbidden_host(url: str, forbidden_hosts: Iterable[str]) -> bool:
    """True when the URL's host, or a parent domain of it, is forbidden."""
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    if not host:
        return False
    forbidden = {item.lower() for item in forbidden_hosts}
    if host in forbidden:
        return True
    return any(host.endswith(f".{item}") for item in forbidden)
