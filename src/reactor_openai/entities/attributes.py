"""
reactor-openai — attribute diffing

Purpose
- Write desired attribute values onto an entity only where they differ from
  what is stored, inside a single deferred-notification scope.

Functional requirements
- Values equal to the ignore sentinel are skipped entirely.
- Equality is structural and type-aware: ``1`` and ``True`` differ, as do
  ``1`` and ``1.0`` when their canonical JSON forms differ.
- The ``_ns_`` placeholder in keys expands to the caller's namespace.
- The deferred scope is always released, including when a write raises.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING

from reactor_openai.constants import IGNORED_VALUE, NAMESPACE_PLACEHOLDER
from reactor_openai.utils.hashing import canonical_json

if TYPE_CHECKING:
    from reactor_openai.domain.models import JSONValue
    from reactor_openai.entities.store import Entity


@contextmanager
def deferred_notifications(entity: Entity) -> Iterator[Entity]:
    """Hold change notifications for ``entity`` until the block exits."""

    entity.defer_notifies(True)
    try:
        yield entity
    finally:
        entity.defer_notifies(False)


def expand_key(key: str, namespace: str) -> str:
    return key.replace(NAMESPACE_PLACEHOLDER, namespace)


def values_equal(left: object, right: object) -> bool:
    """Structural equality that keeps JSON types apart."""

    try:
        return canonical_json(left) == canonical_json(right)
    except (TypeError, ValueError):
        return type(left) is type(right) and left == right


def update_attributes(
    entity: Entity,
    desired: Mapping[str, JSONValue],
    *,
    namespace: str,
) -> frozenset[str]:
    """Apply ``desired`` to ``entity`` and return the expanded keys that changed."""

    changed: set[str] = set()
    with deferred_notifications(entity):
        for key, value in desired.items():
            if isinstance(value, str) and value == IGNORED_VALUE:
                continue
            expanded = expand_key(key, namespace)
            if values_equal(entity.get_attribute(expanded), value):
                continue
            entity.set_attribute(expanded, value)
            changed.add(expanded)
    return frozenset(changed)


__all__ = ["deferred_notifications", "expand_key", "update_attributes", "values_equal"]
