"""
reactor-openai config package public API.

Purpose
- Export config loading/validation entrypoints and public error types.
- Keep import-time surface small; no provider adapters or runtime side effects.
"""

from reactor_openai.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    effective_config,
    load_config,
)
from reactor_openai.config.schema import (
    DEFAULT_CONFIG,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    ControllerConfig,
    ParsedModelConfig,
    assert_valid_config,
    default_config,
    merge_config,
    parse_model_config,
    redact_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ControllerConfig",
    "ParsedModelConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "effective_config",
    "load_config",
    "merge_config",
    "parse_model_config",
    "redact_config",
    "validate_config",
]
