"""
reactor-openai — reconciliation engine

Purpose
- Bring the entity store in line with the configured model list in one pass:
  mark every entity dead, upsert the system entity and one entity per valid
  model, then purge whatever was not seen.

Functional requirements
- Mark/sweep is driven by a per-reconciler epoch counter; entities the
  reconciler has never seen count as last seen in epoch 0.
- Entries without a usable ``id``, ``model`` or ``service`` are skipped with a
  warning and never touch the store. Bad optional fields are dropped with a
  warning and the binding is kept. A repeated id replaces the earlier entry.
- A failure while mapping one entity is logged and recorded; it never aborts
  the pass, and the entity still counts as seen.
- Capabilities are re-registered only when the capability fingerprint changes.

Non-functional requirements
- Deterministic: the same configuration and store produce the same result.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import structlog

from reactor_openai.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    parse_model_config,
)
from reactor_openai.constants import (
    CONTROLLER_VERSION,
    DEFAULT_CONTROLLER_NAME,
    IGNORED_VALUE,
    MODEL_ATTRIBUTE,
    NAMESPACE,
    SERVICE_ATTRIBUTE,
    SYSTEM_CAPABILITY,
    SYSTEM_ENTITY_ID,
    SYSTEM_STATE_ATTRIBUTE,
)
from reactor_openai.domain.models import JSONValue, ModelConfig
from reactor_openai.entities.attributes import (
    deferred_notifications,
    expand_key,
    update_attributes,
)
from reactor_openai.entities.store import Entity, EntityStore
from reactor_openai.utils.hashing import fingerprint


@dataclass(frozen=True, slots=True)
class EntityError:
    """Failure recorded for one entity during a pass."""

    entity_id: str
    stage: str
    detail: str

    def to_dict(self) -> dict[str, str]:
        return {"entity_id": self.entity_id, "stage": self.stage, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    epoch: int
    models: Mapping[str, ModelConfig] = field(default_factory=lambda: MappingProxyType({}))
    created: tuple[str, ...] = ()
    changed: Mapping[str, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))
    purged: tuple[str, ...] = ()
    issues: tuple[ConfigValidationIssue, ...] = ()
    errors: tuple[EntityError, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "epoch": self.epoch,
            "models": {key: self.models[key].redacted() for key in sorted(self.models)},
            "created": list(self.created),
            "changed": {key: sorted(self.changed[key]) for key in sorted(self.changed)},
            "purged": list(self.purged),
            "issues": [{"path": item.path, "message": item.message} for item in self.issues],
            "errors": [item.to_dict() for item in self.errors],
        }


@dataclass(slots=True)
class _PassState:
    epoch: int
    capability_hash: str
    controller_name: str
    created: list[str] = field(default_factory=list)
    changed: dict[str, frozenset[str]] = field(default_factory=dict)
    issues: list[ConfigValidationIssue] = field(default_factory=list)
    errors: list[EntityError] = field(default_factory=list)


class Reconciler:
    """Epoch-based mark/diff/purge over an ``EntityStore``."""

    def __init__(self, *, logger: Any | None = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._epoch = 0
        self._last_seen: dict[str, int] = {}

    @property
    def epoch(self) -> int:
        return self._epoch

    def last_seen(self, entity_id: str) -> int:
        return self._last_seen.get(entity_id, 0)

    def reconcile(
        self,
        configured_models: Sequence[object],
        store: EntityStore,
        *,
        controller_name: str = DEFAULT_CONTROLLER_NAME,
    ) -> ReconcileResult:
        self._epoch += 1
        state = _PassState(
            epoch=self._epoch,
            capability_hash=fingerprint(
                {**store.capability_metadata(), "controller": CONTROLLER_VERSION}
            ),
            controller_name=controller_name,
        )
        self._mark_all_dead(store, state)

        self._map_entity(
            store,
            state,
            entity_id=SYSTEM_ENTITY_ID,
            name=controller_name,
            capabilities=(SYSTEM_CAPABILITY,),
            primary_attribute=SYSTEM_STATE_ATTRIBUTE,
            attributes={SYSTEM_STATE_ATTRIBUTE: IGNORED_VALUE},
        )

        models = self._collect_models(configured_models, state)
        for model in models.values():
            self._map_entity(
                store,
                state,
                entity_id=model.id,
                name=model.name,
                capabilities=(NAMESPACE,),
                primary_attribute=MODEL_ATTRIBUTE,
                attributes={MODEL_ATTRIBUTE: model.model, SERVICE_ATTRIBUTE: model.service},
            )

        purged = self._purge(store, state)
        self._logger.debug(
            "reconcile_completed",
            epoch=state.epoch,
            models=len(models),
            created=len(state.created),
            purged=len(purged),
            errors=len(state.errors),
        )
        return ReconcileResult(
            epoch=state.epoch,
            models=MappingProxyType(models),
            created=tuple(state.created),
            changed=MappingProxyType(dict(state.changed)),
            purged=tuple(purged),
            issues=tuple(state.issues),
            errors=tuple(state.errors),
        )

    def _mark_all_dead(self, store: EntityStore, state: _PassState) -> None:
        for entity_id in list(store.entity_ids()):
            entity = store.find(entity_id)
            if entity is None:
                continue
            try:
                entity.mark_dead(True)
            except Exception as exc:
                self._record_error(state, entity_id, "mark", exc)

    def _collect_models(
        self, configured_models: Sequence[object], state: _PassState
    ) -> dict[str, ModelConfig]:
        if not configured_models:
            self._logger.warning("reconcile_no_models", epoch=state.epoch)
            return {}

        models: dict[str, ModelConfig] = {}
        for index, raw in enumerate(configured_models):
            path = f"models[{index}]"
            try:
                parsed = parse_model_config(raw, path=path)
            except ConfigValidationError as exc:
                self._report(state, path, exc.issues, skipped=True)
                continue
            model = parsed.config
            if model.id == SYSTEM_ENTITY_ID:
                self._report(
                    state,
                    path,
                    [ConfigValidationIssue(f"{path}.id", f"id {model.id!r} is reserved")],
                    skipped=True,
                )
                continue
            issues = list(parsed.issues)
            if model.id in models:
                issues.append(
                    ConfigValidationIssue(
                        f"{path}.id", f"duplicate id {model.id!r} replaces an earlier entry"
                    )
                )
            if issues:
                self._report(state, path, issues, skipped=False)
            models[model.id] = model
        return models

    def _report(
        self,
        state: _PassState,
        path: str,
        issues: Iterable[ConfigValidationIssue],
        *,
        skipped: bool,
    ) -> None:
        reported = tuple(issues)
        state.issues.extend(reported)
        self._logger.warning(
            "invalid_model_config",
            path=path,
            skipped=skipped,
            issues=[f"{item.path}: {item.message}" for item in reported],
        )

    def _map_entity(
        self,
        store: EntityStore,
        state: _PassState,
        *,
        entity_id: str,
        name: str,
        capabilities: Sequence[str],
        primary_attribute: str,
        attributes: Mapping[str, JSONValue],
    ) -> None:
        self._last_seen[entity_id] = state.epoch
        try:
            entity = store.find(entity_id)
            created = entity is None
            if entity is None:
                self._logger.info("entity_created", entity_id=entity_id, name=name)
                entity = store.create(entity_id)
                entity.set_name(name)
                state.created.append(entity_id)

            with deferred_notifications(entity):
                entity.mark_dead(False)
                entity.extend_capabilities(capabilities)
                self._refresh_capabilities(entity, state.capability_hash)
                changed = update_attributes(entity, attributes, namespace=NAMESPACE)
                entity.set_primary_attribute(expand_key(primary_attribute, NAMESPACE))

            if changed:
                state.changed[entity_id] = changed
                self._logger.debug(
                    "entity_attributes_changed", entity_id=entity_id, keys=sorted(changed)
                )
            if created:
                store.send_notice(
                    f'Discovered new device "{name}" ({entity_id}) '
                    f'on controller "{state.controller_name}"'
                )
        except Exception as exc:
            self._record_error(state, entity_id, "map", exc)

    def _refresh_capabilities(self, entity: Entity, capability_hash: str) -> None:
        if entity.capability_hash == capability_hash:
            return
        entity.refresh_capabilities()
        entity.capability_hash = capability_hash
        self._logger.debug("entity_capabilities_refreshed", entity_id=entity.id)

    def _purge(self, store: EntityStore, state: _PassState) -> list[str]:
        purged: list[str] = []
        for entity_id in list(store.entity_ids()):
            if self._last_seen.get(entity_id, 0) >= state.epoch:
                continue
            try:
                store.remove(entity_id)
            except Exception as exc:
                self._record_error(state, entity_id, "purge", exc)
                continue
            self._last_seen.pop(entity_id, None)
            purged.append(entity_id)
            self._logger.info("entity_purged", entity_id=entity_id)
        return purged

    def _record_error(
        self, state: _PassState, entity_id: str, stage: str, exc: Exception
    ) -> None:
        detail = f"{type(exc).__name__}: {exc}"
        state.errors.append(EntityError(entity_id=entity_id, stage=stage, detail=detail))
        self._logger.error(
            "reconcile_entity_failed", entity_id=entity_id, stage=stage, error=detail
        )


__all__ = ["EntityError", "ReconcileResult", "Reconciler"]
