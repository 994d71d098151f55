"""Stable constants shared across controller planes."""

from __future__ import annotations

from typing import Final

# Controller version; participates in the capability fingerprint.
CONTROLLER_VERSION: Final[int] = 24338
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Entity namespaces and well-known attributes.
NAMESPACE: Final[str] = "x_openai"
NAMESPACE_PLACEHOLDER: Final[str] = "_ns_"
IGNORED_VALUE: Final[str] = "@@IGNORED@@"

SYSTEM_ENTITY_ID: Final[str] = "system"
SYSTEM_CAPABILITY: Final[str] = "sys_system"
SYSTEM_STATE_ATTRIBUTE: Final[str] = "sys_system.state"
DEFAULT_CONTROLLER_NAME: Final[str] = "OpenAI Controller"

MODEL_ATTRIBUTE: Final[str] = f"{NAMESPACE_PLACEHOLDER}.model"
SERVICE_ATTRIBUTE: Final[str] = f"{NAMESPACE_PLACEHOLDER}.service"

# Actions.
PROMPT_ACTION: Final[str] = f"{NAMESPACE}.prompt"
RESTART_ACTION: Final[str] = "sys_system.restart"

# Prompt input bounds (characters, inclusive).
PROMPT_MIN_LENGTH: Final[int] = 3
PROMPT_MAX_LENGTH: Final[int] = 6000

# Failure escalation.
DEFAULT_ERROR_INTERVAL_MS: Final[int] = 5_000
DEFAULT_REFRESH_INTERVAL_MS: Final[int] = 60_000
MAX_RETRY_DELAY_MS: Final[int] = 120_000
BACKOFF_GRACE_FAILURES: Final[int] = 12
OFFLINE_FAILURE_THRESHOLD: Final[int] = 3

__all__ = [
    "BACKOFF_GRACE_FAILURES",
    "CONFIG_SCHEMA_VERSION",
    "CONTROLLER_VERSION",
    "DEFAULT_CONTROLLER_NAME",
    "DEFAULT_ERROR_INTERVAL_MS",
    "DEFAULT_REFRESH_INTERVAL_MS",
    "IGNORED_VALUE",
    "MAX_RETRY_DELAY_MS",
    "MODEL_ATTRIBUTE",
    "NAMESPACE",
    "NAMESPACE_PLACEHOLDER",
    "OFFLINE_FAILURE_THRESHOLD",
    "PROMPT_ACTION",
    "PROMPT_MAX_LENGTH",
    "PROMPT_MIN_LENGTH",
    "RESTART_ACTION",
    "SERVICE_ATTRIBUTE",
    "SYSTEM_CAPABILITY",
    "SYSTEM_ENTITY_ID",
    "SYSTEM_STATE_ATTRIBUTE",
]
