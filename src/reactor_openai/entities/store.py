"""
reactor-openai — entity store contracts

Purpose
- Structural interfaces for the host runtime's entity store and its entities.

Functional requirements
- The controller only talks to the host through these protocols; any object
  exposing the same methods can be plugged in.
- ``capability_hash`` is the entity-level slot used to cache the capability
  fingerprint between reconciliation passes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from reactor_openai.domain.models import JSONValue


@runtime_checkable
class Entity(Protocol):
    """One managed record inside the host runtime."""

    capability_hash: str | None

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    def set_name(self, name: str) -> None: ...

    def get_attribute(self, key: str) -> JSONValue: ...

    def set_attribute(self, key: str, value: JSONValue) -> None: ...

    def mark_dead(self, dead: bool) -> None: ...

    def extend_capabilities(self, capabilities: Iterable[str]) -> None: ...

    def refresh_capabilities(self) -> None: ...

    def set_primary_attribute(self, key: str) -> None: ...

    def defer_notifies(self, defer: bool) -> None: ...


@runtime_checkable
class EntityStore(Protocol):
    """Host-side registry of entities owned by one controller."""

    def find(self, entity_id: str) -> Entity | None: ...

    def create(self, entity_id: str) -> Entity: ...

    def remove(self, entity_id: str) -> None: ...

    def entity_ids(self) -> Iterable[str]: ...

    def capability_metadata(self) -> Mapping[str, JSONValue]: ...

    def send_notice(self, message: str) -> None: ...


__all__ = ["Entity", "EntityStore"]
