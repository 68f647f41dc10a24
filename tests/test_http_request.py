import asyncio

import aiohttp
import pytest

from core.exceptions import (
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
)
from core.http.blocklist import PUBLIC_PROVIDER_HOSTS, is_forbidden_host
from core.http.request import request_json
from http_fakes import FakeResponse, FakeSession


def test_is_forbidden_host_matches_host_and_subdomains() -> None:
    hosts = PUBLIC_PROVIDER_HOSTS

    assert is_forbidden_host("https://overpass-api.de/api/interpreter", hosts)
    assert is_forbidden_host("https://lz4.overpass-api.de/api", hosts)
    assert is_forbidden_host("https://ROUTER.project-osrm.org/route", hosts)
    assert not is_forbidden_host("http://overpass.test/api", hosts)
    assert not is_forbidden_host("not a url", hosts)


@pytest.mark.asyncio
async def test_request_json_raises_on_configured_blocked_host(monkeypatch) -> None:
    monkeypatch.setenv("BLOCKED_HOSTS", "osrm.internal, overpass.internal")
    session = FakeSession(get_responses=[FakeResponse(json_data={})])

    with pytest.raises(ValueError, match="blocked host"):
        await request_json(
            "GET",
            "http://osrm.internal/route/v1/car/0,0;1,1",
            session=session,
            service_name="Test",
        )

    assert session.requests == []


@pytest.mark.asyncio
async def test_request_json_returns_body() -> None:
    session = FakeSession(post_responses=[FakeResponse(json_data={"ok": True})])

    data = await request_json(
        "POST",
        "http://overpass.test/api/interpreter",
        session=session,
        data={"data": "[out:json];"},
        service_name="Test",
    )

    assert data == {"ok": True}
    assert session.requests[0][2]["data"] == {"data": "[out:json];"}


@pytest.mark.asyncio
async def test_request_json_raises_on_rate_limit() -> None:
    response = FakeResponse(
        status=429,
        text_data="rate limited",
        headers={"Retry-After": "3"},
    )
    session = FakeSession(get_responses=[response])

    with pytest.raises(RateLimitError) as raised:
        await request_json(
            "GET",
            "http://overpass.test/api/interpreter",
            session=session,
            service_name="Test",
        )

    assert raised.value.details["retry_after"] == 3


@pytest.mark.asyncio
async def test_request_json_accepts_listed_statuses() -> None:
    session = FakeSession(
        get_responses=[
            FakeResponse(status=400, json_data={"code": "NoRoute"}),
            FakeResponse(status=500, text_data="boom"),
        ],
    )

    data = await request_json(
        "GET",
        "http://osrm.test/route",
        session=session,
        expected_status=(200, 400),
        service_name="Test",
    )
    assert data == {"code": "NoRoute"}

    with pytest.raises(ExternalServiceError, match="Test error: 500"):
        await request_json(
            "GET",
            "http://osrm.test/route",
            session=session,
            expected_status=(200, 400),
            service_name="Test",
        )


@pytest.mark.asyncio
async def test_request_json_rejects_unsupported_method() -> None:
    with pytest.raises(ExternalServiceError, match="unsupported method"):
        await request_json("DELETE", "http://osrm.test/route", session=FakeSession())


@pytest.mark.asyncio
async def test_request_json_wraps_connection_failures() -> None:
    session = FakeSession(
        post_responses=[aiohttp.ClientConnectionError("connection refused")],
    )

    with pytest.raises(ServiceUnavailableError) as raised:
        await request_json(
            "POST",
            "http://overpass.test/api/interpreter",
            session=session,
            service_name="Overpass",
        )

    assert isinstance(raised.value, ExternalServiceError)
    assert raised.value.message.startswith("Overpass request failed")
    assert raised.value.details["url"] == "http://overpass.test/api/interpreter"


@pytest.mark.asyncio
async def test_request_json_wraps_timeouts() -> None:
    session = FakeSession(get_responses=[asyncio.TimeoutError()])

    with pytest.raises(ServiceUnavailableError, match="OSRM request failed"):
        await request_json(
            "GET",
            "http://osrm.test/route/v1/car/0,0;1,1",
            session=session,
            service_name="OSRM",
        )
