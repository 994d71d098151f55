"""Unit tests for config schema validation and model entry parsing."""

from __future__ import annotations

import pytest

from reactor_openai.config.schema import (
    ConfigValidationError,
    ControllerConfig,
    assert_valid_config,
    default_config,
    merge_config,
    parse_model_config,
    redact_config,
    validate_config,
)


def _issue_paths(error: ConfigValidationError) -> set[str]:
    return {issue.path for issue in error.issues}


@pytest.mark.unit
def test_default_config_is_valid_and_isolated() -> None:
    first = default_config()
    first["controller"]["name"] = "mutated"

    result = validate_config(default_config())

    assert result.is_valid
    assert result.config is not None
    assert result.config["controller"] == {
        "name": "OpenAI Controller",
        "error_interval": 5000,
        "refresh_interval": 60000,
    }
    assert result.config["logging"] == {"level": "INFO", "json": False}
    assert result.config["models"] == []


@pytest.mark.unit
def test_validation_reports_every_issue_with_paths() -> None:
    payload = merge_config(
        default_config(),
        {
            "meta": {"schema_version": 2},
            "controller": {"error_interval": 0, "refresh_interval": "soon", "extra": 1},
            "logging": {"level": "loud", "json": "yes"},
            "surprise": True,
        },
    )

    result = validate_config(payload)

    assert not result.is_valid
    assert {issue.path for issue in result.issues} == {
        "meta.schema_version",
        "controller.error_interval",
        "controller.refresh_interval",
        "controller.extra",
        "logging.level",
        "logging.json",
        "surprise",
    }


@pytest.mark.unit
def test_logging_level_is_case_insensitive() -> None:
    config = assert_valid_config(merge_config(default_config(), {"logging": {"level": "debug"}}))

    assert config["logging"]["level"] == "DEBUG"


@pytest.mark.unit
@pytest.mark.parametrize("models", ["gpt", {"id": "gpt"}, 3])
def test_models_must_be_an_array(models: object) -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_config(merge_config(default_config(), {"models": models}))

    assert _issue_paths(exc_info.value) == {"models"}


@pytest.mark.unit
def test_model_entries_are_not_validated_at_pass_level() -> None:
    config = assert_valid_config(
        merge_config(default_config(), {"models": [{"id": "gpt"}, "junk"]})
    )

    assert config["models"] == [{"id": "gpt"}, "junk"]


@pytest.mark.unit
def test_controller_config_from_mapping() -> None:
    typed = ControllerConfig.from_mapping(
        {
            "controller": {"name": "Lab", "error_interval": 250},
            "models": [{"id": "gpt", "model": "gpt-4o", "service": "openai"}, "junk"],
        }
    )

    assert typed.name == "Lab"
    assert typed.error_interval_ms == 250
    assert typed.refresh_interval_ms == 60000
    assert typed.models[0]["id"] == "gpt"  # type: ignore[index]
    assert typed.models[1] == "junk"
    with pytest.raises(TypeError):
        typed.models[0]["id"] = "other"  # type: ignore[index]


@pytest.mark.unit
def test_parse_model_config_normalizes_entry() -> None:
    parsed = parse_model_config(
        {
            "id": 7,
            "model": "gpt-4o",
            "service": "OpenAI",
            "temperature": 0,
            "max_tokens": 512,
            "stop": ["\n\n"],
            "unrelated": "ignored",
        }
    )

    assert parsed.issues == ()
    model = parsed.config
    assert model.id == "7"
    assert model.name == "7"
    assert model.service == "openai"
    assert model.temperature == 0.0
    assert model.max_tokens == 512
    assert model.stop == ["\n\n"]
    assert model.api_key is None


@pytest.mark.unit
@pytest.mark.parametrize(
    ("entry", "bad_path"),
    [
        ("not a table", "models[3]"),
        ({"model": "m", "service": "openai"}, "models[3].id"),
        ({"id": "a", "service": "openai"}, "models[3].model"),
        ({"id": "a", "model": "m"}, "models[3].service"),
        ({"id": True, "model": "m", "service": "openai"}, "models[3].id"),
        ({"id": "   ", "model": "m", "service": "openai"}, "models[3].id"),
        ({"id": "a", "model": "", "service": "openai"}, "models[3].model"),
    ],
)
def test_parse_model_config_rejects_unusable_bindings(entry: object, bad_path: str) -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        parse_model_config(entry, path="models[3]")

    assert bad_path in _issue_paths(exc_info.value)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("extra", "field_name"),
    [
        ({"max_tokens": 0}, "max_tokens"),
        ({"temperature": float("nan")}, "temperature"),
        ({"top_p": "high"}, "top_p"),
        ({"stop": [1]}, "stop"),
        ({"api_key": 5}, "api_key"),
        ({"endpoint": ""}, "endpoint"),
    ],
)
def test_parse_model_config_drops_bad_optional_fields(
    extra: dict[str, object], field_name: str
) -> None:
    parsed = parse_model_config(
        {"id": "a", "model": "m", "service": "openai", **extra}, path="models[3]"
    )

    assert getattr(parsed.config, field_name) is None
    assert [issue.path for issue in parsed.issues] == [f"models[3].{field_name}"]


@pytest.mark.unit
def test_parse_model_config_unusable_name_falls_back_to_id() -> None:
    parsed = parse_model_config({"id": "a", "model": "m", "service": "openai", "name": "  "})

    assert parsed.config.name == "a"
    assert [issue.path for issue in parsed.issues] == ["models[].name"]


@pytest.mark.unit
def test_redact_config_masks_keys_but_not_env_names() -> None:
    redacted = redact_config(
        {
            "models": [
                {"id": "gpt", "api_key": "sk-secret", "api_key_env": "OPENAI_API_KEY"},
                {"id": "az", "api_key": None},
            ]
        }
    )

    assert redacted["models"][0]["api_key"] == "<redacted>"
    assert redacted["models"][0]["api_key_env"] == "OPENAI_API_KEY"
    assert redacted["models"][1]["api_key"] is None
