"""
reactor-openai — completion controller

Purpose
- Own controller state and wire reconciliation, failure escalation and prompt
  dispatch together behind a small lifecycle API.

Functional requirements
- ``run_pass`` reconciles once, swaps the model snapshot atomically and
  returns the delay until the next pass; a pass-level failure feeds the
  failure tracker instead of propagating.
- While stopping no new pass starts, but in-flight dispatches complete.
- The system entity's state attribute mirrors online/offline transitions.

Non-functional requirements
- Single-threaded cooperative scheduling; one pass at a time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

import structlog

from reactor_openai.config.schema import ControllerConfig
from reactor_openai.constants import (
    NAMESPACE,
    PROMPT_ACTION,
    RESTART_ACTION,
    SYSTEM_ENTITY_ID,
    SYSTEM_STATE_ATTRIBUTE,
)
from reactor_openai.control_plane.backoff import FailureTracker
from reactor_openai.control_plane.dispatch import PromptDispatcher
from reactor_openai.control_plane.reconciler import ReconcileResult, Reconciler
from reactor_openai.domain.errors import UnknownEntityError, UnsupportedActionError
from reactor_openai.domain.models import ControllerState, ControllerStatus, ModelConfig
from reactor_openai.entities.attributes import update_attributes
from reactor_openai.entities.store import EntityStore
from reactor_openai.providers.transport import NetworkCall

ConfigSource: TypeAlias = ControllerConfig | Callable[[], ControllerConfig]
SleepFn: TypeAlias = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class PassOutcome:
    """What one pass did and when the next one should run."""

    delay_ms: int
    status: ControllerStatus
    failures: int
    result: ReconcileResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class CompletionController:
    def __init__(
        self,
        store: EntityStore,
        transport: NetworkCall,
        config: ConfigSource,
        *,
        logger: Any | None = None,
    ) -> None:
        self._store = store
        self._config_source = config
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._state = ControllerState()
        self._tracker = FailureTracker()
        self._models: Mapping[str, ModelConfig] = MappingProxyType({})
        self._reconciler = Reconciler(logger=self._logger)
        self._dispatcher = PromptDispatcher(transport, lambda: self._models, logger=self._logger)

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def status(self) -> ControllerStatus:
        return self._state.status

    @property
    def models(self) -> Mapping[str, ModelConfig]:
        return self._models

    @property
    def dispatcher(self) -> PromptDispatcher:
        return self._dispatcher

    def start(self) -> PassOutcome | None:
        self._state.stopping = False
        self._state.status = ControllerStatus.STARTING
        self._logger.info("controller_starting")
        return self.run_pass()

    def run_pass(self) -> PassOutcome | None:
        """Run one reconciliation pass; returns ``None`` while stopping."""

        if self._state.stopping:
            self._logger.debug("pass_skipped", reason="stopping")
            return None

        try:
            config = self._load_config()
            self._tracker.error_interval_ms = config.error_interval_ms
            result = self._reconciler.reconcile(
                config.models, self._store, controller_name=config.name
            )
        except Exception as exc:
            return self._on_pass_failure(exc)

        self._models = result.models
        self._tracker.record_success()
        self._state.consecutive_failures = 0
        self._state.status = ControllerStatus.ONLINE
        self._write_system_state(True)
        self._logger.info(
            "pass_completed",
            epoch=result.epoch,
            models=len(result.models),
            next_delay_ms=config.refresh_interval_ms,
        )
        return PassOutcome(
            delay_ms=config.refresh_interval_ms,
            status=ControllerStatus.ONLINE,
            failures=0,
            result=result,
        )

    async def perform_action(
        self,
        entity_id: str,
        action: str,
        params: Mapping[str, object] | None = None,
    ) -> str | None:
        entity = self._store.find(entity_id)
        if entity is None:
            self._logger.warning("action_unknown_entity", entity_id=entity_id, action=action)
            raise UnknownEntityError(entity_id)

        if action == PROMPT_ACTION:
            return await self._dispatcher.dispatch(entity, params)
        if action == RESTART_ACTION:
            self._logger.info("controller_restart", entity_id=entity_id)
            self._state.stopping = False
            self.run_pass()
            return None

        self._logger.warning("action_unsupported", entity_id=entity_id, action=action)
        raise UnsupportedActionError(action)

    async def stop(self, timeout_seconds: float | None = None) -> bool:
        """Stop scheduling passes.

        Returns ``False`` when in-flight dispatches outlive ``timeout_seconds``.
        """

        self._state.stopping = True
        self._state.status = ControllerStatus.STOPPING
        self._logger.info("controller_stopping", in_flight=self._dispatcher.in_flight)
        drained = await self._dispatcher.wait_idle(timeout_seconds)
        if not drained:
            self._logger.warning(
                "controller_stop_timeout",
                timeout_seconds=timeout_seconds,
                in_flight=self._dispatcher.in_flight,
            )
        return drained

    async def run_forever(self, sleep: SleepFn = asyncio.sleep) -> None:
        outcome = self.start()
        while outcome is not None and not self._state.stopping:
            await sleep(outcome.delay_ms / 1000.0)
            outcome = self.run_pass()

    def _load_config(self) -> ControllerConfig:
        if isinstance(self._config_source, ControllerConfig):
            return self._config_source
        return self._config_source()

    def _on_pass_failure(self, exc: Exception) -> PassOutcome:
        detail = f"{type(exc).__name__}: {exc}"
        decision = self._tracker.record_failure()
        self._state.consecutive_failures = decision.failures
        self._state.status = decision.status
        self._logger.error(
            "pass_failed",
            error=detail,
            failures=decision.failures,
            next_delay_ms=decision.delay_ms,
            status=str(decision.status),
        )
        if decision.status is ControllerStatus.OFFLINE:
            self._write_system_state(False)
        return PassOutcome(
            delay_ms=decision.delay_ms,
            status=decision.status,
            failures=decision.failures,
            error=detail,
        )

    def _write_system_state(self, online: bool) -> None:
        entity = self._store.find(SYSTEM_ENTITY_ID)
        if entity is None:
            return
        try:
            update_attributes(entity, {SYSTEM_STATE_ATTRIBUTE: online}, namespace=NAMESPACE)
        except Exception as exc:
            self._logger.error(
                "system_state_write_failed", online=online, error=f"{type(exc).__name__}: {exc}"
            )


__all__ = ["CompletionController", "ConfigSource", "PassOutcome"]
