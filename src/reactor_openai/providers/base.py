"""
reactor-openai — backend variant base and shared request model

Purpose
- Abstract backend variant interface and the normalized chat request it builds.

What should be included in this file
- Request fields: url, headers, JSON body.
- Generation parameter resolution (call-time > model config > default).
- Response normalization to the first choice's message content.

Functional requirements
- ``None`` means "not provided" at every precedence level; explicit zeros win.
- Adding a backend must not touch the dispatcher or reconciler.

Non-functional requirements
- Request objects must never render credentials in ``repr``.
"""

from __future__ import annotations

import abc
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from reactor_openai.domain.errors import MalformedResponseError
from reactor_openai.domain.models import GENERATION_FIELDS, JSONValue, ModelConfig, ServiceKind

GENERATION_DEFAULTS: Final[Mapping[str, JSONValue]] = MappingProxyType(
    {
        "max_tokens": 2000,
        "temperature": 0.5,
        "top_p": 1,
        "frequency_penalty": 0,
        "presence_penalty": 0,
        "stop": None,
    }
)

JSON_CONTENT_TYPE: Final[str] = "application/json"
_SECRET_HEADERS: Final[frozenset[str]] = frozenset({"authorization", "api-key"})


@dataclass(frozen=True, slots=True)
class ChatRequest:
    """Fully resolved HTTP request for one chat completion."""

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, JSONValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "body", MappingProxyType(dict(self.body)))

    def to_dict(self, *, redact: bool = True) -> dict[str, JSONValue]:
        headers: dict[str, JSONValue] = {
            key: "***REDACTED***" if redact and key.lower() in _SECRET_HEADERS else value
            for key, value in self.headers.items()
        }
        return {"url": self.url, "headers": headers, "body": dict(self.body)}

    def __repr__(self) -> str:
        return f"ChatRequest(url={self.url!r}, headers={self.to_dict()['headers']!r})"


def resolve_generation_params(
    model_config: ModelConfig,
    prompt_params: Mapping[str, object],
) -> dict[str, JSONValue]:
    """Resolve each generation parameter with call-time > model config > default."""

    resolved: dict[str, JSONValue] = {}
    for name in GENERATION_FIELDS:
        value = prompt_params.get(name)
        if value is None:
            value = model_config.generation_value(name)
        if value is None:
            value = GENERATION_DEFAULTS[name]
        resolved[name] = value  # type: ignore[assignment]
    return resolved


def extract_message_content(payload: object) -> str:
    """Return ``choices[0].message.content`` or raise ``MalformedResponseError``."""

    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f"response body is not an object: {type(payload).__name__}")
    choices = payload.get("choices")
    if (
        isinstance(choices, (str, bytes))
        or not isinstance(choices, Sequence)
        or not choices
    ):
        raise MalformedResponseError("response does not contain any choices")
    message = choices[0].get("message") if isinstance(choices[0], Mapping) else None
    content = message.get("content") if isinstance(message, Mapping) else None
    if not isinstance(content, str):
        raise MalformedResponseError("choices[0].message.content is missing or not a string")
    return content


class ServiceVariant(abc.ABC):
    """One chat-completion backend flavour."""

    kind: ServiceKind

    def build(
        self,
        model_config: ModelConfig,
        prompt_params: Mapping[str, object],
        *,
        model: str | None = None,
    ) -> ChatRequest:
        """Build the request for ``prompt_params['text']`` against ``model_config``."""

        body: dict[str, JSONValue] = {
            "model": model or model_config.model,
            "messages": [{"role": "user", "content": str(prompt_params.get("text", ""))}],
        }
        body.update(resolve_generation_params(model_config, prompt_params))
        return ChatRequest(
            url=self.url_for(model_config),
            headers={"Content-Type": JSON_CONTENT_TYPE, **self.auth_headers(model_config)},
            body=self.adapt_body(body),
        )

    @abc.abstractmethod
    def url_for(self, model_config: ModelConfig) -> str:
        """Return the completion endpoint for ``model_config``."""

    @abc.abstractmethod
    def auth_headers(self, model_config: ModelConfig) -> dict[str, str]:
        """Return the credential header(s) for ``model_config``."""

    def adapt_body(self, body: dict[str, JSONValue]) -> dict[str, JSONValue]:
        return body


__all__ = [
    "GENERATION_DEFAULTS",
    "JSON_CONTENT_TYPE",
    "ChatRequest",
    "ServiceVariant",
    "extract_message_content",
    "resolve_generation_params",
]
