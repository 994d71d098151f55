"""Unit tests for prompt validation and dispatch."""

from __future__ import annotations

import httpx
import pytest

from reactor_openai.control_plane.dispatch import PromptDispatcher, validate_prompt
from reactor_openai.control_plane.reconciler import Reconciler
from reactor_openai.domain.errors import (
    MalformedResponseError,
    MissingParameterError,
    RemoteServiceError,
    TooLongError,
    TooShortError,
    TransportError,
    UnknownModelError,
    UnsupportedServiceError,
)
from reactor_openai.entities.memory import InMemoryEntityStore
from reactor_openai.providers.transport import HttpxTransport, TransportResponse

from . import FakeTransport, RecordingLogger, completion, model_entry

_OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _setup(
    *entries: dict[str, object],
) -> tuple[PromptDispatcher, InMemoryEntityStore, FakeTransport, RecordingLogger]:
    logger = RecordingLogger()
    store = InMemoryEntityStore()
    result = Reconciler(logger=logger).reconcile(list(entries), store)
    transport = FakeTransport()
    dispatcher = PromptDispatcher(transport, lambda: result.models, logger=logger)
    return dispatcher, store, transport, logger


@pytest.mark.unit
@pytest.mark.parametrize(
    ("params", "error_type"),
    [
        (None, MissingParameterError),
        ({}, MissingParameterError),
        ({"text": 123}, MissingParameterError),
        ({"text": ""}, TooShortError),
        ({"text": "ab"}, TooShortError),
        ({"text": "x" * 6001}, TooLongError),
    ],
)
def test_validate_prompt_rejections(params: dict[str, object] | None, error_type: type) -> None:
    error = validate_prompt(params)

    assert isinstance(error, error_type)
    assert error.parameter == "text"


@pytest.mark.unit
@pytest.mark.parametrize("length", [3, 6000])
def test_validate_prompt_accepts_boundaries(length: int) -> None:
    assert validate_prompt({"text": "x" * length}) is None


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("text", "code"),
    [("ab", "too_short"), ("x" * 6001, "too_long")],
)
async def test_rejected_prompt_returns_none_without_network(text: str, code: str) -> None:
    dispatcher, store, transport, logger = _setup(model_entry("gpt"))

    reply = await dispatcher.dispatch(store.entities["gpt"], {"text": text})

    assert reply is None
    assert transport.calls == []
    rejected = logger.named("prompt_rejected")
    assert rejected[0]["code"] == code
    assert rejected[0]["parameter"] == "text"
    assert rejected[0]["length"] == len(text)
    assert "prompt_rejected" in logger.at("warning")


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("length", [3, 6000])
async def test_boundary_prompts_are_sent(length: int) -> None:
    dispatcher, store, transport, _ = _setup(model_entry("gpt"))
    transport.responses.append(completion("pong"))

    reply = await dispatcher.dispatch(store.entities["gpt"], {"text": "x" * length})

    assert reply == "pong"
    assert len(transport.calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_openai_dispatch_builds_request_from_entity_and_config() -> None:
    dispatcher, store, transport, _ = _setup(
        model_entry("gpt", model="gpt-4o", temperature=0.2, max_tokens=128)
    )

    await dispatcher.dispatch(store.entities["gpt"], {"text": "Hello there", "top_p": 0})

    url, headers, body = transport.calls[0]
    assert url == _OPENAI_URL
    assert headers["Authorization"] == "Bearer sk-test-0000000000000000"
    assert body["model"] == "gpt-4o"
    assert body["max_completion_tokens"] == 128
    assert body["temperature"] == 0.2
    assert body["top_p"] == 0
    assert "max_tokens" not in body


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unsupported_service_fails_before_network() -> None:
    dispatcher, store, transport, logger = _setup(model_entry("claude", service="Anthropic"))

    with pytest.raises(UnsupportedServiceError, match="anthropic"):
        await dispatcher.dispatch(store.entities["claude"], {"text": "Hello there"})

    assert transport.calls == []
    assert logger.named("prompt_failed")[0]["error_type"] == "UnsupportedServiceError"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_model_is_logged_and_raised() -> None:
    dispatcher, store, transport, logger = _setup(model_entry("gpt"))

    with pytest.raises(UnknownModelError):
        await dispatcher.dispatch(store.entities["system"], {"text": "Hello there"})

    assert transport.calls == []
    assert "prompt_failed" in logger.at("error")
    assert logger.named("prompt_failed")[0]["entity_id"] == "system"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_http_error_status_raises_remote_service_error() -> None:
    dispatcher, store, transport, logger = _setup(model_entry("gpt"))
    transport.responses.append(
        TransportResponse(ok=False, status=429, status_text="Too Many Requests")
    )

    with pytest.raises(RemoteServiceError) as exc_info:
        await dispatcher.dispatch(store.entities["gpt"], {"text": "Hello there"})

    error = exc_info.value
    assert error.status == 429
    assert error.url == _OPENAI_URL
    assert error.retryable is True
    assert f"HTTP error - {_OPENAI_URL} - 429 - Too Many Requests" in str(error)
    assert logger.named("prompt_failed")[0]["retryable"] is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_failure_propagates() -> None:
    dispatcher, store, transport, _ = _setup(model_entry("gpt"))
    transport.responses.append(TransportError(url=_OPENAI_URL, detail="connection reset"))

    with pytest.raises(TransportError, match="connection reset"):
        await dispatcher.dispatch(store.entities["gpt"], {"text": "Hello there"})

    assert dispatcher.in_flight == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_response_raises() -> None:
    dispatcher, store, transport, _ = _setup(model_entry("gpt"))
    transport.responses.append(
        TransportResponse(ok=True, status=200, status_text="OK", json_body={"choices": []})
    )

    with pytest.raises(MalformedResponseError):
        await dispatcher.dispatch(store.entities["gpt"], {"text": "Hello there"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_wait_idle_returns_immediately_without_in_flight_work() -> None:
    dispatcher, _, _, _ = _setup(model_entry("gpt"))

    assert await dispatcher.wait_idle(0.01) is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_azure_endpoint_is_logged_as_transport_failure() -> None:
    logger = RecordingLogger()
    store = InMemoryEntityStore()
    entry = model_entry("az", service="azure", endpoint="https://example.com/\x00chat")
    result = Reconciler(logger=logger).reconcile([entry], store)
    mock = httpx.MockTransport(lambda request: httpx.Response(200))

    async with httpx.AsyncClient(transport=mock) as client:
        dispatcher = PromptDispatcher(
            HttpxTransport(client=client), lambda: result.models, logger=logger
        )
        with pytest.raises(TransportError):
            await dispatcher.dispatch(store.entities["az"], {"text": "Hello there"})

    failed = logger.named("prompt_failed")
    assert failed[0]["error_type"] == "TransportError"
    assert failed[0]["retryable"] is True
