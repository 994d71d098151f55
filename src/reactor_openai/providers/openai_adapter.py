"""
reactor-openai — OpenAI chat-completions variant

Purpose
- Build requests for the public OpenAI chat-completions endpoint.

Functional requirements
- Bearer authentication from the model's ``api_key``.
- ``max_tokens`` is sent as ``max_completion_tokens``.
"""

from __future__ import annotations

from typing import Final

from reactor_openai.domain.models import JSONValue, ModelConfig, ServiceKind
from reactor_openai.providers.base import ServiceVariant

OPENAI_CHAT_COMPLETIONS_URL: Final[str] = "https://api.openai.com/v1/chat/completions"


class OpenAIVariant(ServiceVariant):
    kind = ServiceKind.OPENAI

    def __init__(self, *, url: str = OPENAI_CHAT_COMPLETIONS_URL) -> None:
        self._url = url

    def url_for(self, model_config: ModelConfig) -> str:
        return self._url

    def auth_headers(self, model_config: ModelConfig) -> dict[str, str]:
        return {"Authorization": f"Bearer {model_config.api_key or ''}"}

    def adapt_body(self, body: dict[str, JSONValue]) -> dict[str, JSONValue]:
        adapted = dict(body)
        adapted["max_completion_tokens"] = adapted.pop("max_tokens", None)
        return adapted


__all__ = ["OPENAI_CHAT_COMPLETIONS_URL", "OpenAIVariant"]
