"""Unit tests for the httpx-backed transport (offline via ``httpx.MockTransport``)."""

from __future__ import annotations

import json

import httpx
import pytest

from reactor_openai.domain.errors import TransportError
from reactor_openai.providers.transport import HttpxTransport, NetworkCall

_URL = "https://api.openai.com/v1/chat/completions"


def _client(handler: httpx.MockTransport) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=handler)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_send_posts_json_and_returns_parsed_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": "hi"}}]})

    async with _client(httpx.MockTransport(handler)) as client:
        transport = HttpxTransport(client=client)
        response = await transport.send(
            _URL,
            {"Content-Type": "application/json", "Authorization": "Bearer k"},
            {"model": "gpt-4o", "messages": [{"role": "user", "content": "Hello"}]},
        )

    assert isinstance(transport, NetworkCall)
    assert response.ok is True
    assert response.status == 200
    assert response.status_text == "OK"
    assert response.json_body == {"choices": [{"message": {"content": "hi"}}]}

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == _URL
    assert request.headers["authorization"] == "Bearer k"
    assert json.loads(request.content) == {
        "model": "gpt-4o",
        "messages": [{"role": "user", "content": "Hello"}],
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_error_status_is_returned_not_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream unavailable")

    async with _client(httpx.MockTransport(handler)) as client:
        response = await HttpxTransport(client=client).send(_URL, {}, {})

    assert response.ok is False
    assert response.status == 503
    assert response.status_text == "Service Unavailable"
    assert response.json_body is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(httpx.MockTransport(handler)) as client:
        with pytest.raises(TransportError) as exc_info:
            await HttpxTransport(client=client).send(_URL, {}, {})

    assert exc_info.value.url == _URL
    assert exc_info.value.retryable is True
    assert "connection refused" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_injected_client_is_not_closed_by_transport() -> None:
    client = _client(httpx.MockTransport(lambda request: httpx.Response(204)))
    transport = HttpxTransport(client=client)

    await transport.aclose()

    assert client.is_closed is False
    await client.aclose()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_owned_client_is_closed_on_exit() -> None:
    async with HttpxTransport(timeout_seconds=5.0) as transport:
        client = transport._client

    assert client.is_closed is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_url_raises_transport_error() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    bad_url = "https://example.openai.azure.com/\x00deployments"
    async with _client(httpx.MockTransport(handler)) as client:
        with pytest.raises(TransportError) as exc_info:
            await HttpxTransport(client=client).send(bad_url, {}, {})

    assert calls == []
    assert exc_info.value.retryable is True
    assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
