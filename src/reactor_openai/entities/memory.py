"""
reactor-openai — in-memory entity store

Purpose
- Reference implementation of the entity store protocols, used by the CLI
  and by tests.

Functional requirements
- Nested ``defer_notifies`` scopes are counted; one coalesced notification
  carrying every changed key is emitted when the outermost scope closes.
- Outside a deferred scope each attribute write notifies immediately.
- Notices sent through the store are recorded in order.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from reactor_openai.domain.models import JSONValue


@dataclass(frozen=True, slots=True)
class AttributeNotification:
    entity_id: str
    keys: frozenset[str]


class InMemoryEntity:
    """Dict-backed entity that records the notifications it would emit."""

    def __init__(self, entity_id: str, *, store: InMemoryEntityStore | None = None) -> None:
        self._id = entity_id
        self._name = entity_id
        self._store = store
        self.attributes: dict[str, JSONValue] = {}
        self.capabilities: set[str] = set()
        self.primary_attribute: str | None = None
        self.dead = False
        self.capability_hash: str | None = None
        self.refresh_count = 0
        self.notifications: list[AttributeNotification] = []
        self._defer_depth = 0
        self._pending: set[str] = set()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def deferring(self) -> bool:
        return self._defer_depth > 0

    def set_name(self, name: str) -> None:
        self._name = name

    def get_attribute(self, key: str) -> JSONValue:
        return copy.deepcopy(self.attributes.get(key))

    def set_attribute(self, key: str, value: JSONValue) -> None:
        self.attributes[key] = copy.deepcopy(value)
        self._pending.add(key)
        if not self.deferring:
            self._flush()

    def mark_dead(self, dead: bool) -> None:
        self.dead = bool(dead)

    def extend_capabilities(self, capabilities: Iterable[str]) -> None:
        self.capabilities.update(capabilities)

    def refresh_capabilities(self) -> None:
        self.refresh_count += 1

    def set_primary_attribute(self, key: str) -> None:
        self.primary_attribute = key

    def defer_notifies(self, defer: bool) -> None:
        if defer:
            self._defer_depth += 1
            return
        if self._defer_depth == 0:
            return
        self._defer_depth -= 1
        if self._defer_depth == 0:
            self._flush()

    def _flush(self) -> None:
        if not self._pending:
            return
        notification = AttributeNotification(entity_id=self._id, keys=frozenset(self._pending))
        self._pending.clear()
        self.notifications.append(notification)
        if self._store is not None:
            self._store.notifications.append(notification)

    def __repr__(self) -> str:
        return f"InMemoryEntity(id={self._id!r}, name={self._name!r}, dead={self.dead})"


@dataclass(slots=True)
class InMemoryEntityStore:
    """Ordered entity registry with notice and notification capture."""

    metadata: dict[str, Any] = field(default_factory=dict)
    entities: dict[str, InMemoryEntity] = field(default_factory=dict)
    notices: list[str] = field(default_factory=list)
    notifications: list[AttributeNotification] = field(default_factory=list)

    def find(self, entity_id: str) -> InMemoryEntity | None:
        return self.entities.get(entity_id)

    def create(self, entity_id: str) -> InMemoryEntity:
        if entity_id in self.entities:
            raise ValueError(f"entity already exists: {entity_id!r}")
        entity = InMemoryEntity(entity_id, store=self)
        self.entities[entity_id] = entity
        return entity

    def remove(self, entity_id: str) -> None:
        self.entities.pop(entity_id, None)

    def entity_ids(self) -> list[str]:
        return list(self.entities)

    def capability_metadata(self) -> Mapping[str, Any]:
        return copy.deepcopy(self.metadata)

    def send_notice(self, message: str) -> None:
        self.notices.append(message)

    def snapshot(self) -> dict[str, dict[str, JSONValue]]:
        """Return a plain-data view of every entity, ordered by id."""

        return {
            entity_id: {
                "name": entity.name,
                "dead": entity.dead,
                "primary_attribute": entity.primary_attribute,
                "capabilities": sorted(entity.capabilities),
                "attributes": {key: entity.attributes[key] for key in sorted(entity.attributes)},
            }
            for entity_id, entity in sorted(self.entities.items())
        }


__all__ = ["AttributeNotification", "InMemoryEntity", "InMemoryEntityStore"]
