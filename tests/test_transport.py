"""Tests for RemoteTransport against a local aiohttp backend."""

import pytest

from core.exceptions import ConfigurationAbsent, RemoteRejected, TransportFailure
from services import RemoteTransport


@pytest.mark.asyncio
async def test_get_returns_json_object(http_transport, stub_backend):
    payload = await http_transport.call("/stats")

    assert payload == stub_backend.stats
    assert stub_backend.requests[0]["method"] == "GET"


@pytest.mark.asyncio
async def test_post_sends_body_and_bearer_token(http_transport, stub_backend):
    await http_transport.call("/stats/user", "POST", {"userId": "u-1"})

    request = stub_backend.requests[0]
    assert request["path"] == "/stats/user"
    assert request["body"] == {"userId": "u-1"}
    assert request["headers"]["Authorization"] == "Bearer secret-key"
    assert request["headers"]["Content-Type"].startswith("application/json")


@pytest.mark.asyncio
async def test_no_auth_header_without_key(backend_url, stub_backend):
    async with RemoteTransport(backend_url) as transport:
        await transport.call("/stats")

    assert "Authorization" not in stub_backend.requests[0]["headers"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 404, 500, 503])
async def test_non_2xx_is_rejected(http_transport, stub_backend, status):
    stub_backend.status = status

    with pytest.raises(RemoteRejected) as exc_info:
        await http_transport.call("/stats")

    assert exc_info.value.status == status
    assert exc_info.value.path == "/stats"


@pytest.mark.asyncio
async def test_slow_backend_times_out(backend_url, stub_backend):
    stub_backend.delay = 1.0

    async with RemoteTransport(backend_url, timeout_ms=100) as transport:
        with pytest.raises(TransportFailure) as exc_info:
            await transport.call("/stats")

    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_unreachable_backend_is_transport_failure():
    async with RemoteTransport("http://127.0.0.1:1", timeout_ms=1000) as transport:
        with pytest.raises(TransportFailure):
            await transport.call("/stats")


@pytest.mark.asyncio
async def test_missing_url_is_configuration_absent():
    transport = RemoteTransport("   ")

    assert transport.configured is False
    with pytest.raises(ConfigurationAbsent):
        await transport.call("/stats")


@pytest.mark.asyncio
async def test_trailing_slash_in_base_url(backend_url, stub_backend):
    async with RemoteTransport(backend_url + "/") as transport:
        await transport.call("/stats")

    assert stub_backend.requests[0]["path"] == "/stats"
