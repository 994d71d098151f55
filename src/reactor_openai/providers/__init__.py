"""
reactor-openai — backend variants and transport

Purpose
- Request construction for the supported chat-completion backends (OpenAI,
  Azure OpenAI) and the HTTP collaborator that sends them.

Non-functional requirements
- Must never log secrets or raw API keys.
"""

from reactor_openai.providers.azure_adapter import AzureVariant
from reactor_openai.providers.base import (
    GENERATION_DEFAULTS,
    ChatRequest,
    ServiceVariant,
    extract_message_content,
    resolve_generation_params,
)
from reactor_openai.providers.openai_adapter import OPENAI_CHAT_COMPLETIONS_URL, OpenAIVariant
from reactor_openai.providers.registry import (
    DEFAULT_VARIANTS,
    build_request,
    resolve_service,
    variant_for,
)
from reactor_openai.providers.transport import (
    DEFAULT_TIMEOUT_SECONDS,
    HttpxTransport,
    NetworkCall,
    TransportResponse,
)

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_VARIANTS",
    "GENERATION_DEFAULTS",
    "OPENAI_CHAT_COMPLETIONS_URL",
    "AzureVariant",
    "ChatRequest",
    "HttpxTransport",
    "NetworkCall",
    "OpenAIVariant",
    "ServiceVariant",
    "TransportResponse",
    "build_request",
    "extract_message_content",
    "resolve_generation_params",
    "resolve_service",
    "variant_for",
]
