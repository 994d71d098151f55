"""
reactor-openai — network call collaborator

Purpose
- Send one JSON POST and hand back a normalized response.

Functional requirements
- Connection-level failures raise ``TransportError``; HTTP error statuses are
  returned, not raised, so the caller decides how to report them.
- A body that is not valid JSON yields ``json_body=None``.

Non-functional requirements
- The default client carries a finite timeout (120 s).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

import httpx

from reactor_openai.domain.errors import TransportError
from reactor_openai.domain.models import JSONValue

DEFAULT_TIMEOUT_SECONDS: Final[float] = 120.0


@dataclass(frozen=True, slots=True)
class TransportResponse:
    ok: bool
    status: int
    status_text: str
    json_body: object = None


@runtime_checkable
class NetworkCall(Protocol):
    async def send(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, JSONValue],
    ) -> TransportResponse: ...


class HttpxTransport:
    """``httpx.AsyncClient`` backed transport; owns the client unless one is injected."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout_seconds)

    async def send(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, JSONValue],
    ) -> TransportResponse:
        try:
            response = await self._client.post(url, headers=dict(headers), json=dict(body))
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise TransportError(url=url, detail=f"{type(exc).__name__}: {exc}") from exc

        try:
            payload: object = response.json()
        except ValueError:
            payload = None

        return TransportResponse(
            ok=response.is_success,
            status=response.status_code,
            status_text=response.reason_phrase,
            json_body=payload,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "HttpxTransport", "NetworkCall", "TransportResponse"]
