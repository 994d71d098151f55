"""
reactor-openai — Azure OpenAI chat-completions variant

Purpose
- Build requests for an Azure OpenAI deployment.

Functional requirements
- The configured ``endpoint`` is used verbatim as the request URL.
- Authentication uses the ``api-key`` header.
- An entry without an endpoint is a configuration error, raised at build time.
"""

from __future__ import annotations

from reactor_openai.config.schema import ConfigValidationError, ConfigValidationIssue
from reactor_openai.domain.models import ModelConfig, ServiceKind
from reactor_openai.providers.base import ServiceVariant


class AzureVariant(ServiceVariant):
    kind = ServiceKind.AZURE

    def url_for(self, model_config: ModelConfig) -> str:
        if not model_config.endpoint:
            raise ConfigValidationError(
                [
                    ConfigValidationIssue(
                        path=f"models[{model_config.id}].endpoint",
                        message="azure models require an endpoint",
                    )
                ]
            )
        return model_config.endpoint

    def auth_headers(self, model_config: ModelConfig) -> dict[str, str]:
        return {"api-key": model_config.api_key or ""}


__all__ = ["AzureVariant"]
