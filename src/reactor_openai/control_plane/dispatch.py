"""
reactor-openai — prompt dispatch

Purpose
- Validate a prompt action, build the backend request for the entity's bound
  model, send it and return the reply text.

Functional requirements
- Invalid input is reported by returning ``None`` after a warning; no
  request is built and no network call is made.
- Unknown models, unsupported services, HTTP error statuses, transport
  failures and malformed replies raise typed errors to the caller.
- Dispatch never touches the controller's failure counter.
- In-flight dispatches are counted so shutdown can wait for them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

import structlog

from reactor_openai.config.schema import ConfigValidationError
from reactor_openai.constants import (
    MODEL_ATTRIBUTE,
    NAMESPACE,
    PROMPT_MAX_LENGTH,
    PROMPT_MIN_LENGTH,
    SERVICE_ATTRIBUTE,
)
from reactor_openai.domain.errors import (
    ControllerError,
    InputValidationError,
    MissingParameterError,
    RemoteServiceError,
    TooLongError,
    TooShortError,
    UnknownModelError,
    is_retryable_error,
)
from reactor_openai.domain.models import ModelConfig
from reactor_openai.entities.attributes import expand_key
from reactor_openai.entities.store import Entity
from reactor_openai.providers.base import extract_message_content
from reactor_openai.providers.registry import build_request
from reactor_openai.providers.transport import NetworkCall

ModelsProvider: TypeAlias = Callable[[], Mapping[str, ModelConfig]]


def validate_prompt(params: Mapping[str, object] | None) -> InputValidationError | None:
    """Return the first input problem with ``params``, or ``None`` when acceptable."""

    text = params.get("text") if params is not None else None
    if not isinstance(text, str):
        return MissingParameterError("text")
    if len(text) < PROMPT_MIN_LENGTH:
        return TooShortError("text", length=len(text), minimum=PROMPT_MIN_LENGTH)
    if len(text) > PROMPT_MAX_LENGTH:
        return TooLongError("text", length=len(text), maximum=PROMPT_MAX_LENGTH)
    return None


class PromptDispatcher:
    def __init__(
        self,
        transport: NetworkCall,
        models: ModelsProvider,
        *,
        logger: Any | None = None,
    ) -> None:
        self._transport = transport
        self._models = models
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def dispatch(
        self, entity: Entity, params: Mapping[str, object] | None
    ) -> str | None:
        """Send ``params['text']`` to the backend bound to ``entity``."""

        rejection = validate_prompt(params)
        if rejection is not None:
            self._logger.warning(
                "prompt_rejected",
                entity_id=entity.id,
                parameter=rejection.parameter,
                code=rejection.code,
                length=rejection.length,
                detail=rejection.detail,
            )
            return None

        self._in_flight += 1
        self._idle.clear()
        try:
            return await self._call_service(entity, params or {})
        except (ControllerError, ConfigValidationError) as exc:
            self._logger.error(
                "prompt_failed",
                entity_id=entity.id,
                error_type=type(exc).__name__,
                error=str(exc),
                retryable=is_retryable_error(exc),
            )
            raise
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def wait_idle(self, timeout_seconds: float | None = None) -> bool:
        """Wait for in-flight dispatches; returns ``False`` if the timeout expired first."""

        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _call_service(self, entity: Entity, params: Mapping[str, object]) -> str:
        service = entity.get_attribute(expand_key(SERVICE_ATTRIBUTE, NAMESPACE))
        model_config = self._models().get(entity.id)
        if model_config is None:
            raise UnknownModelError(entity.id)

        bound_model = entity.get_attribute(expand_key(MODEL_ATTRIBUTE, NAMESPACE))
        request = build_request(
            service,
            model_config,
            params,
            model=bound_model if isinstance(bound_model, str) and bound_model else None,
        )
        self._logger.debug(
            "prompt_request",
            entity_id=entity.id,
            service=service,
            url=request.url,
            model=request.body.get("model"),
        )

        response = await self._transport.send(request.url, request.headers, request.body)
        if not response.ok:
            raise RemoteServiceError(
                url=request.url, status=response.status, status_text=response.status_text
            )
        content = extract_message_content(response.json_body)
        self._logger.debug("prompt_response", entity_id=entity.id, chars=len(content))
        return content


__all__ = ["ModelsProvider", "PromptDispatcher", "validate_prompt"]
