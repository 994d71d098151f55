"""Dataclass domain models shared by the reconciler, request builder, and controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

GENERATION_FIELDS: Final[tuple[str, ...]] = (
    "max_tokens",
    "temperature",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
    "stop",
)


class ServiceKind(StrEnum):
    """Closed set of supported chat-completion backends."""

    OPENAI = "openai"
    AZURE = "azure"


class ControllerStatus(StrEnum):
    STARTING = "starting"
    ONLINE = "online"
    DEGRADED = "degraded"
    OFFLINE = "offline"
    STOPPING = "stopping"


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """One configured backend binding.

    ``service`` is kept as the lower-cased configured string; unsupported
    values are registered and rejected only when a prompt is dispatched.
    """

    id: str
    model: str
    service: str
    name: str
    api_key: str | None = None
    endpoint: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop: JSONValue = None

    def generation_value(self, field_name: str) -> JSONValue:
        if field_name not in GENERATION_FIELDS:
            raise KeyError(f"not a generation parameter: {field_name}")
        value: JSONValue = getattr(self, field_name)
        return value

    def redacted(self) -> dict[str, JSONValue]:
        return {
            "id": self.id,
            "name": self.name,
            "model": self.model,
            "service": self.service,
            "endpoint": self.endpoint,
            "api_key": "***REDACTED***" if self.api_key else None,
        }


@dataclass(slots=True)
class ControllerState:
    """Process-wide mutable controller state; one instance per controller."""

    stopping: bool = False
    consecutive_failures: int = 0
    status: ControllerStatus = ControllerStatus.STARTING


__all__ = [
    "GENERATION_FIELDS",
    "ControllerState",
    "ControllerStatus",
    "JSONScalar",
    "JSONValue",
    "ModelConfig",
    "ServiceKind",
]
