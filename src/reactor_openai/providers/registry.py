"""
reactor-openai — backend variant registry

Purpose
- Map the closed ``ServiceKind`` set onto one variant object each and build
  requests through it.

Functional requirements
- Unknown service strings raise ``UnsupportedServiceError`` naming the value,
  before any request or network activity.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from reactor_openai.domain.errors import UnsupportedServiceError
from reactor_openai.domain.models import ModelConfig, ServiceKind
from reactor_openai.providers.azure_adapter import AzureVariant
from reactor_openai.providers.base import ChatRequest, ServiceVariant
from reactor_openai.providers.openai_adapter import OpenAIVariant

DEFAULT_VARIANTS: Final[Mapping[ServiceKind, ServiceVariant]] = MappingProxyType(
    {
        ServiceKind.OPENAI: OpenAIVariant(),
        ServiceKind.AZURE: AzureVariant(),
    }
)


def resolve_service(service: object) -> ServiceKind:
    """Return the ``ServiceKind`` for ``service`` (case-insensitive)."""

    if isinstance(service, ServiceKind):
        return service
    if isinstance(service, str):
        try:
            return ServiceKind(service.strip().lower())
        except ValueError:
            pass
    raise UnsupportedServiceError(service)


def variant_for(
    service: object,
    *,
    variants: Mapping[ServiceKind, ServiceVariant] = DEFAULT_VARIANTS,
) -> ServiceVariant:
    kind = resolve_service(service)
    variant = variants.get(kind)
    if variant is None:
        raise UnsupportedServiceError(service)
    return variant


def build_request(
    service: object,
    model_config: ModelConfig,
    prompt_params: Mapping[str, object],
    *,
    model: str | None = None,
    variants: Mapping[ServiceKind, ServiceVariant] = DEFAULT_VARIANTS,
) -> ChatRequest:
    """Build the chat request for ``service``; ``model`` overrides the configured name."""

    return variant_for(service, variants=variants).build(model_config, prompt_params, model=model)


__all__ = ["DEFAULT_VARIANTS", "build_request", "resolve_service", "variant_for"]
