"""
reactor-openai — failure escalation and retry timing

Purpose
- Translate consecutive pass failures into a retry delay and a controller status.

Functional requirements
- ``delay = min(120000, error_interval * max(1, failures - 12))`` milliseconds.
- 0 failures is online, 1 or 2 is degraded, 3 or more is offline.
- Offline is a status; passes keep being scheduled.
"""

from __future__ import annotations

from dataclasses import dataclass

from reactor_openai.constants import (
    BACKOFF_GRACE_FAILURES,
    DEFAULT_ERROR_INTERVAL_MS,
    MAX_RETRY_DELAY_MS,
    OFFLINE_FAILURE_THRESHOLD,
)
from reactor_openai.domain.models import ControllerStatus


@dataclass(frozen=True, slots=True)
class BackoffDecision:
    failures: int
    delay_ms: int
    status: ControllerStatus

    def to_dict(self) -> dict[str, object]:
        return {"failures": self.failures, "delay_ms": self.delay_ms, "status": str(self.status)}


def compute_retry_delay_ms(
    failures: int, error_interval_ms: int = DEFAULT_ERROR_INTERVAL_MS
) -> int:
    """Return the delay before the next pass after ``failures`` consecutive failures."""

    if failures < 0:
        raise ValueError("failures must be >= 0")
    if error_interval_ms < 0:
        raise ValueError("error_interval_ms must be >= 0")
    multiplier = max(1, failures - BACKOFF_GRACE_FAILURES)
    return min(MAX_RETRY_DELAY_MS, error_interval_ms * multiplier)


def status_for_failures(failures: int) -> ControllerStatus:
    if failures < 0:
        raise ValueError("failures must be >= 0")
    if failures == 0:
        return ControllerStatus.ONLINE
    if failures < OFFLINE_FAILURE_THRESHOLD:
        return ControllerStatus.DEGRADED
    return ControllerStatus.OFFLINE


class FailureTracker:
    """Consecutive-failure counter; the single authority for retry timing."""

    __slots__ = ("_error_interval_ms", "_failures")

    def __init__(self, *, error_interval_ms: int = DEFAULT_ERROR_INTERVAL_MS) -> None:
        self._error_interval_ms = error_interval_ms
        self._failures = 0

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def error_interval_ms(self) -> int:
        return self._error_interval_ms

    @error_interval_ms.setter
    def error_interval_ms(self, value: int) -> None:
        if value < 0:
            raise ValueError("error_interval_ms must be >= 0")
        self._error_interval_ms = value

    def record_failure(self) -> BackoffDecision:
        self._failures += 1
        return BackoffDecision(
            failures=self._failures,
            delay_ms=compute_retry_delay_ms(self._failures, self._error_interval_ms),
            status=status_for_failures(self._failures),
        )

    def record_success(self) -> ControllerStatus:
        self._failures = 0
        return ControllerStatus.ONLINE


def backoff_table(
    max_failures: int, error_interval_ms: int = DEFAULT_ERROR_INTERVAL_MS
) -> tuple[BackoffDecision, ...]:
    """Decisions for 1..``max_failures`` consecutive failures."""

    return tuple(
        BackoffDecision(
            failures=count,
            delay_ms=compute_retry_delay_ms(count, error_interval_ms),
            status=status_for_failures(count),
        )
        for count in range(1, max_failures + 1)
    )


__all__ = [
    "BackoffDecision",
    "FailureTracker",
    "backoff_table",
    "compute_retry_delay_ms",
    "status_for_failures",
]
