"""Normalized controller error taxonomy with machine-readable fields."""

from __future__ import annotations


def _normalize_detail(value: object) -> str:
    text = " ".join(str(value).split())
    return text or "no detail"


class ControllerError(RuntimeError):
    """Base controller error with deterministic ``code``/``retryable`` fields."""

    def __init__(self, *, code: str, detail: str, retryable: bool = False) -> None:
        self.code = code
        self.detail = _normalize_detail(detail)
        self.retryable = bool(retryable)
        super().__init__(f"code={self.code} retryable={str(self.retryable).lower()} {self.detail}")


class UnsupportedServiceError(ControllerError):
    """Model is bound to a backend variant the controller cannot talk to."""

    def __init__(self, service: object) -> None:
        self.service = service
        super().__init__(code="unsupported_service", detail=f"model is not supported: {service!r}")


class InputValidationError(ControllerError):
    """Prompt parameters rejected before any request is built."""

    def __init__(
        self, detail: str, *, code: str, parameter: str, length: int | None = None
    ) -> None:
        self.parameter = parameter
        self.length = length
        super().__init__(code=code, detail=detail)


class MissingParameterError(InputValidationError):
    def __init__(self, parameter: str) -> None:
        super().__init__(
            f"{parameter} param is mandatory and must be specified",
            code="missing_parameter",
            parameter=parameter,
        )


class TooShortError(InputValidationError):
    def __init__(self, parameter: str, *, length: int, minimum: int) -> None:
        self.minimum = minimum
        super().__init__(
            f"{parameter} param must be at least {minimum} chars, got {length}",
            code="too_short",
            parameter=parameter,
            length=length,
        )


class TooLongError(InputValidationError):
    def __init__(self, parameter: str, *, length: int, maximum: int) -> None:
        self.maximum = maximum
        super().__init__(
            f"{parameter} param must be at most {maximum} chars, got {length}",
            code="too_long",
            parameter=parameter,
            length=length,
        )


class UnknownModelError(ControllerError):
    """Entity is not bound to any model in the current configuration snapshot."""

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(
            code="unknown_model", detail=f"no model configured for entity {entity_id!r}"
        )


class UnknownEntityError(ControllerError):
    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(code="unknown_entity", detail=f"entity not found: {entity_id!r}")


class UnsupportedActionError(ControllerError):
    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(code="unsupported_action", detail=f"action not supported: {action!r}")


class ServiceCallError(ControllerError):
    """Remote call failed; retryable from the caller's perspective."""

    def __init__(self, *, code: str, detail: str, url: str) -> None:
        self.url = url
        super().__init__(code=code, detail=detail, retryable=True)


class RemoteServiceError(ServiceCallError):
    """Remote backend answered with a non-success HTTP status."""

    def __init__(self, *, url: str, status: int, status_text: str) -> None:
        self.status = status
        self.status_text = status_text
        super().__init__(
            code="remote_service",
            detail=f"HTTP error - {url} - {status} - {status_text}",
            url=url,
        )


class TransportError(ServiceCallError):
    """Connection-level failure before any HTTP status was received."""

    def __init__(self, *, url: str, detail: str) -> None:
        super().__init__(code="transport", detail=f"{url} - {detail}", url=url)


class MalformedResponseError(ControllerError):
    """Response payload does not expose ``choices[0].message.content``."""

    def __init__(self, detail: str) -> None:
        super().__init__(code="malformed_response", detail=detail)


def is_retryable_error(error: BaseException) -> bool:
    return isinstance(error, ControllerError) and error.retryable


__all__ = [
    "ControllerError",
    "InputValidationError",
    "MalformedResponseError",
    "MissingParameterError",
    "RemoteServiceError",
    "ServiceCallError",
    "TooLongError",
    "TooShortError",
    "TransportError",
    "UnknownEntityError",
    "UnknownModelError",
    "UnsupportedActionError",
    "UnsupportedServiceError",
    "is_retryable_error",
]
