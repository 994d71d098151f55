"""Shared fakes for control-plane tests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from reactor_openai.domain.models import JSONValue
from reactor_openai.providers.transport import TransportResponse


@dataclass(slots=True)
class RecordingLogger:
    events: list[tuple[str, str, dict[str, object]]] = field(default_factory=list)

    def debug(self, event: str, **kwargs: object) -> None:
        self.events.append(("debug", event, dict(kwargs)))

    def info(self, event: str, **kwargs: object) -> None:
        self.events.append(("info", event, dict(kwargs)))

    def warning(self, event: str, **kwargs: object) -> None:
        self.events.append(("warning", event, dict(kwargs)))

    def error(self, event: str, **kwargs: object) -> None:
        self.events.append(("error", event, dict(kwargs)))

    def named(self, event: str) -> list[dict[str, object]]:
        return [payload for _, name, payload in self.events if name == event]

    def at(self, level: str) -> list[str]:
        return [name for recorded, name, _ in self.events if recorded == level]


@dataclass(slots=True)
class FakeTransport:
    """Scripted ``NetworkCall``; replays responses (or raises exceptions) in order."""

    responses: list[TransportResponse | Exception] = field(default_factory=list)
    calls: list[tuple[str, dict[str, str], dict[str, JSONValue]]] = field(default_factory=list)

    async def send(
        self,
        url: str,
        headers: Mapping[str, str],
        body: Mapping[str, JSONValue],
    ) -> TransportResponse:
        self.calls.append((url, dict(headers), dict(body)))
        if not self.responses:
            return completion("ok")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def completion(content: object) -> TransportResponse:
    return TransportResponse(
        ok=True,
        status=200,
        status_text="OK",
        json_body={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]},
    )


def model_entry(entry_id: str, **overrides: object) -> dict[str, object]:
    entry: dict[str, object] = {
        "id": entry_id,
        "name": entry_id.upper(),
        "model": "gpt-4o",
        "service": "openai",
        "api_key": "sk-test-0000000000000000",
    }
    entry.update(overrides)
    return entry
