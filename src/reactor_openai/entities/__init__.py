"""Entity store contracts, attribute diffing, and the in-memory reference store."""

from reactor_openai.entities.attributes import (
    deferred_notifications,
    expand_key,
    update_attributes,
    values_equal,
)
from reactor_openai.entities.memory import (
    AttributeNotification,
    InMemoryEntity,
    InMemoryEntityStore,
)
from reactor_openai.entities.store import Entity, EntityStore

__all__ = [
    "AttributeNotification",
    "Entity",
    "EntityStore",
    "InMemoryEntity",
    "InMemoryEntityStore",
    "deferred_notifications",
    "expand_key",
    "update_attributes",
    "values_equal",
]
