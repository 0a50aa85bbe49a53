import httpx
import pytest

from conftest import RecordingTransport
from silver_care_mcp.errors import ErrorKind, Unauthorized, UpstreamError
from silver_care_mcp.fetcher import RetryingFetcher
from silver_care_mcp.location import LocationResolver
from silver_care_mcp.models import LocationNotFound, NotFoundReason, ResolvedLocation

JONGNO = {
    "lat": "37.5735",
    "lon": "126.9788",
    "display_name": "Jongno-gu, Seoul, South Korea",
    "type": "administrative",
}


def resolver_for(handler, test_config, sleep):
    transport = RecordingTransport(handler)
    return LocationResolver(RetryingFetcher(transport=transport, sleep=sleep), test_config), transport


@pytest.mark.asyncio
async def test_resolves_first_match(test_config, sleep):
    resolver, transport = resolver_for(lambda request: httpx.Response(200, json=[JONGNO]), test_config, sleep)

    location = await resolver.resolve("Jongno-gu")

    assert isinstance(location, ResolvedLocation)
    assert location.coordinates.latitude == pytest.approx(37.5735)
    assert location.coordinates.longitude == pytest.approx(126.9788)
    assert location.display_name == "Jongno-gu, Seoul, South Korea"

    request = transport.requests[0]
    assert request.url.host == "geocode.test"
    assert request.url.params["format"] == "json"
    assert request.url.params["q"] == "Jongno-gu"
    assert request.url.params["limit"] == "1"
    assert request.url.params["countrycodes"] == "kr"
    assert request.headers["User-Agent"] == "SilverCare-MCP/1.0"
    assert request.extensions["timeout"]["read"] == 5.0


@pytest.mark.asyncio
async def test_zero_results_is_not_found(test_config, sleep):
    resolver, _ = resolver_for(lambda request: httpx.Response(200, json=[]), test_config, sleep)

    location = await resolver.resolve("Atlantis")

    assert isinstance(location, LocationNotFound)
    assert location.reason is NotFoundReason.NO_MATCH
    assert location.query == "Atlantis"


@pytest.mark.asyncio
async def test_unauthorized_propagates(test_config, sleep):
    resolver, _ = resolver_for(lambda request: httpx.Response(401), test_config, sleep)

    with pytest.raises(Unauthorized):
        await resolver.resolve("Jongno-gu")


@pytest.mark.asyncio
async def test_exhausted_retries_is_lookup_failure(test_config, sleep):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    resolver, transport = resolver_for(handler, test_config, sleep)

    location = await resolver.resolve("Jongno-gu")

    assert isinstance(location, LocationNotFound)
    assert location.reason is NotFoundReason.LOOKUP_FAILED
    assert len(transport.requests) == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_server_error_is_lookup_failure(test_config, sleep):
    resolver, _ = resolver_for(lambda request: httpx.Response(500), test_config, sleep)

    location = await resolver.resolve("Jongno-gu")

    assert isinstance(location, LocationNotFound)
    assert location.reason is NotFoundReason.LOOKUP_FAILED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        [dict(JONGNO, lat="north-ish")],
        [dict(JONGNO, lat="91.5")],
        [{"display_name": "Jongno-gu"}],
        {"lat": "37.5", "lon": "127.0"},
    ],
)
async def test_malformed_result_fails_loudly_as_upstream_error(test_config, sleep, payload):
    resolver, _ = resolver_for(lambda request: httpx.Response(200, json=payload), test_config, sleep)

    with pytest.raises(UpstreamError) as excinfo:
        await resolver.resolve("Jongno-gu")

    assert excinfo.value.kind is ErrorKind.UPSTREAM_ERROR
    assert "malformed" in excinfo.value.message
