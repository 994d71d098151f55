"""
reactor-openai — configuration schema and validation.

Purpose
- Define authoritative configuration defaults and strict validation rules for
  the ``controller`` and ``logging`` sections.
- Parse individual ``[[models]]`` entries into ``ModelConfig`` records.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Model entries are validated one at a time. An entry without a usable
  ``id``, ``model`` or ``service`` is skipped; malformed optional fields are
  reported and dropped while the binding itself is kept.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Final, TypedDict

from reactor_openai.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_CONTROLLER_NAME,
    DEFAULT_ERROR_INTERVAL_MS,
    DEFAULT_REFRESH_INTERVAL_MS,
)
from reactor_openai.domain.models import JSONValue, ModelConfig

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")
REQUIRED_MODEL_FIELDS: Final[tuple[str, ...]] = ("id", "model", "service")

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SENSITIVE_KEY_TOKENS: Final[frozenset[str]] = frozenset(
    {"secret", "token", "password", "apikey", "authorization", "credential"}
)
_SENSITIVE_KEY_PHRASES: Final[tuple[str, ...]] = ("api_key", "client_secret", "private_key")
_REDACTED: Final[str] = "<redacted>"


class MetaConfig(TypedDict):
    schema_version: int


class ControllerSection(TypedDict):
    name: str
    error_interval: int
    refresh_interval: int


class LoggingSection(TypedDict):
    level: str
    json: bool


class RootConfig(TypedDict):
    meta: MetaConfig
    controller: ControllerSection
    logging: LoggingSection
    models: list[dict[str, object]]


DEFAULT_CONFIG: Final[RootConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "controller": {
        "name": DEFAULT_CONTROLLER_NAME,
        "error_interval": DEFAULT_ERROR_INTERVAL_MS,
        "refresh_interval": DEFAULT_REFRESH_INTERVAL_MS,
    },
    "logging": {"level": "INFO", "json": False},
    "models": [],
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


@dataclass(frozen=True, slots=True)
class ParsedModelConfig:
    """A usable model binding plus the optional fields that were dropped from it."""

    config: ModelConfig
    issues: tuple[ConfigValidationIssue, ...] = ()


@dataclass(frozen=True, slots=True)
class ControllerConfig:
    """Typed, read-only view over a validated config payload."""

    name: str = DEFAULT_CONTROLLER_NAME
    error_interval_ms: int = DEFAULT_ERROR_INTERVAL_MS
    refresh_interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS
    models: tuple[object, ...] = ()

    @classmethod
    def from_mapping(cls, config: Mapping[str, object]) -> ControllerConfig:
        validated = assert_valid_config(merge_config(default_config(), config))
        controller = validated["controller"]
        return cls(
            name=controller["name"],
            error_interval_ms=controller["error_interval"],
            refresh_interval_ms=controller["refresh_interval"],
            models=tuple(
                MappingProxyType(dict(item)) if isinstance(item, Mapping) else item
                for item in validated["models"]
            ),
        )


def default_config() -> RootConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``; lists are replaced."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, {"meta", "controller", "logging", "models"}, "", issues)
    normalized: dict[str, Any] = {}

    meta = _section(root, "meta", issues)
    if meta is not None:
        _reject_unknown_keys(meta, {"schema_version"}, "meta", issues)
        version = _as_int(meta.get("schema_version"), "meta.schema_version", issues, minimum=1)
        if version is not None and version != ConfigSchemaVersion:
            issues.add(
                "meta.schema_version",
                f"schema version {version} is not supported (expected {ConfigSchemaVersion})",
            )
        normalized["meta"] = {"schema_version": version}

    controller = _section(root, "controller", issues)
    if controller is not None:
        _reject_unknown_keys(
            controller, {"name", "error_interval", "refresh_interval"}, "controller", issues
        )
        normalized["controller"] = {
            "name": _as_str(controller.get("name"), "controller.name", issues),
            "error_interval": _as_int(
                controller.get("error_interval"), "controller.error_interval", issues, minimum=1
            ),
            "refresh_interval": _as_int(
                controller.get("refresh_interval"), "controller.refresh_interval", issues, minimum=1
            ),
        }

    logging_section = _section(root, "logging", issues)
    if logging_section is not None:
        _reject_unknown_keys(logging_section, {"level", "json"}, "logging", issues)
        level = logging_section.get("level")
        normalized["logging"] = {
            "level": _as_enum(
                level.upper() if isinstance(level, str) else level,
                "logging.level",
                issues,
                allowed_values=LOG_LEVELS,
            ),
            "json": _as_bool(logging_section.get("json"), "logging.json", issues),
        }

    models = root.get("models", [])
    if isinstance(models, (str, bytes)) or not isinstance(models, Sequence):
        issues.add("models", f"expected array of tables, got {type(models).__name__}")
    else:
        normalized["models"] = [copy.deepcopy(item) for item in models]

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def parse_model_config(raw: object, *, path: str = "models[]") -> ParsedModelConfig:
    """Parse one ``[[models]]`` entry.

    Only a non-table entry or an unusable ``id``, ``model`` or ``service`` raises
    ``ConfigValidationError``. Malformed optional fields are reported in
    ``ParsedModelConfig.issues`` and left unset, so request defaults apply and
    an unusable ``name`` falls back to the id.
    """

    required = _IssueCollector()
    entry = _as_object(raw, path, required)
    if entry is None:
        raise ConfigValidationError(required.items())

    for key in REQUIRED_MODEL_FIELDS:
        if entry.get(key) is None:
            required.add(_join(path, key), "missing required field")

    raw_id = entry.get("id")
    model_id: str | None = None
    if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool):
        model_id = str(raw_id).strip() or None
    if raw_id is not None and model_id is None:
        required.add(_join(path, "id"), "must be a non-empty string")
    model = _optional_str(entry.get("model"), _join(path, "model"), required)
    service = _optional_str(entry.get("service"), _join(path, "service"), required)

    if required.has_issues or model_id is None or model is None or service is None:
        raise ConfigValidationError(required.items())

    optional = _IssueCollector()
    name = _optional_str(entry.get("name"), _join(path, "name"), optional)
    api_key = _optional_str(entry.get("api_key"), _join(path, "api_key"), optional)
    endpoint = _optional_str(entry.get("endpoint"), _join(path, "endpoint"), optional)

    max_tokens = entry.get("max_tokens")
    if max_tokens is not None:
        max_tokens = _as_int(max_tokens, _join(path, "max_tokens"), optional, minimum=1)
    floats: dict[str, float | None] = {}
    for key in ("temperature", "top_p", "frequency_penalty", "presence_penalty"):
        value = entry.get(key)
        floats[key] = None if value is None else _as_float(value, _join(path, key), optional)
    stop = _as_stop(entry.get("stop"), _join(path, "stop"), optional)

    return ParsedModelConfig(
        config=ModelConfig(
            id=model_id,
            model=model,
            service=service.lower(),
            name=name or model_id,
            api_key=api_key,
            endpoint=endpoint,
            max_tokens=max_tokens,
            temperature=floats["temperature"],
            top_p=floats["top_p"],
            frequency_penalty=floats["frequency_penalty"],
            presence_penalty=floats["presence_penalty"],
            stop=stop,
        ),
        issues=optional.items(),
    )


def redact_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Return deterministic redacted representation for logs."""

    if not isinstance(config, Mapping):
        return {}
    redacted = _redact_value(config, parent_key=None)
    if isinstance(redacted, dict):
        return redacted
    return {}


def _section(
    root: Mapping[str, object], key: str, issues: _IssueCollector
) -> dict[str, object] | None:
    if key not in root:
        issues.add(key, "missing required section")
        return None
    return _as_object(root[key], key, issues)


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _optional_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if value is None:
        return None
    return _as_str(value, path, issues)


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_float(value: object, path: str, issues: _IssueCollector) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
        return None
    parsed = float(value)
    if not math.isfinite(parsed):
        issues.add(path, "must be finite")
        return None
    return parsed


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _as_stop(value: object, path: str, issues: _IssueCollector) -> JSONValue:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, Sequence) and all(isinstance(item, str) for item in value):
        return list(value)
    issues.add(path, "expected string or array of strings")
    return None


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _looks_sensitive_key(key: str) -> bool:
    normalized = _normalize_key(key)
    if any(phrase in normalized for phrase in _SENSITIVE_KEY_PHRASES):
        return True
    tokens = tuple(token for token in normalized.split("_") if token)
    return any(token in _SENSITIVE_KEY_TOKENS for token in tokens)


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: _deep_copy_value(value[key]) for key in sorted(value)}


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return {key: _deep_copy_value(item) for key, item in value.items() if isinstance(key, str)}
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_deep_copy_value(item) for item in value)
    return copy.deepcopy(value)


def _redact_value(value: object, parent_key: str | None) -> object:
    if isinstance(value, Mapping):
        out: dict[str, object] = {}
        for key in sorted(value):
            item = value[key]
            if _looks_sensitive_key(key) and not _normalize_key(key).endswith("_env"):
                out[key] = _REDACTED if item is not None else None
            else:
                out[key] = _redact_value(item, key)
        return out
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, parent_key) for item in value]
    return value


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "REQUIRED_MODEL_FIELDS",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ControllerConfig",
    "ParsedModelConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "parse_model_config",
    "redact_config",
    "validate_config",
]
