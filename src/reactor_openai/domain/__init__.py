"""Domain types shared across planes: model bindings, controller state, and errors."""

from reactor_openai.domain.errors import (
    ControllerError,
    InputValidationError,
    MalformedResponseError,
    MissingParameterError,
    RemoteServiceError,
    ServiceCallError,
    TooLongError,
    TooShortError,
    TransportError,
    UnknownEntityError,
    UnknownModelError,
    UnsupportedActionError,
    UnsupportedServiceError,
    is_retryable_error,
)
from reactor_openai.domain.models import (
    GENERATION_FIELDS,
    ControllerState,
    ControllerStatus,
    JSONValue,
    ModelConfig,
    ServiceKind,
)

__all__ = [
    "GENERATION_FIELDS",
    "ControllerError",
    "ControllerState",
    "ControllerStatus",
    "InputValidationError",
    "JSONValue",
    "MalformedResponseError",
    "MissingParameterError",
    "ModelConfig",
    "RemoteServiceError",
    "ServiceCallError",
    "ServiceKind",
    "TooLongError",
    "TooShortError",
    "TransportError",
    "UnknownEntityError",
    "UnknownModelError",
    "UnsupportedActionError",
    "UnsupportedServiceError",
    "is_retryable_error",
]
