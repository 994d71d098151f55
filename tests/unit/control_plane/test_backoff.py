"""Unit tests for retry delay computation and failure escalation."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reactor_openai.control_plane.backoff import (
    FailureTracker,
    backoff_table,
    compute_retry_delay_ms,
    status_for_failures,
)
from reactor_openai.domain.models import ControllerStatus


@pytest.mark.unit
@pytest.mark.parametrize(
    ("failures", "expected_ms"),
    [
        (1, 5_000),
        (2, 5_000),
        (12, 5_000),
        (13, 5_000),
        (14, 10_000),
        (25, 65_000),
        (35, 115_000),
        (36, 120_000),
        (500, 120_000),
    ],
)
def test_retry_delay_table(failures: int, expected_ms: int) -> None:
    assert compute_retry_delay_ms(failures, 5_000) == expected_ms


@pytest.mark.unit
def test_retry_delay_scales_with_error_interval() -> None:
    assert compute_retry_delay_ms(1, 1_000) == 1_000
    assert compute_retry_delay_ms(20, 1_000) == 8_000
    assert compute_retry_delay_ms(20, 60_000) == 120_000


@pytest.mark.unit
@settings(max_examples=200, deadline=None)
@given(
    failures=st.integers(min_value=0, max_value=10_000),
    interval=st.integers(min_value=0, max_value=300_000),
)
def test_retry_delay_is_bounded_and_monotonic(failures: int, interval: int) -> None:
    delay = compute_retry_delay_ms(failures, interval)
    assert 0 <= delay <= 120_000
    assert delay == min(120_000, interval * max(1, failures - 12))
    assert compute_retry_delay_ms(failures + 1, interval) >= delay


@pytest.mark.unit
def test_retry_delay_rejects_negative_inputs() -> None:
    with pytest.raises(ValueError, match="failures"):
        compute_retry_delay_ms(-1, 5_000)
    with pytest.raises(ValueError, match="error_interval_ms"):
        compute_retry_delay_ms(1, -5)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("failures", "status"),
    [
        (0, ControllerStatus.ONLINE),
        (1, ControllerStatus.DEGRADED),
        (2, ControllerStatus.DEGRADED),
        (3, ControllerStatus.OFFLINE),
        (40, ControllerStatus.OFFLINE),
    ],
)
def test_status_for_failures(failures: int, status: ControllerStatus) -> None:
    assert status_for_failures(failures) is status


@pytest.mark.unit
def test_tracker_goes_offline_on_third_failure_and_resets_on_success() -> None:
    tracker = FailureTracker(error_interval_ms=5_000)

    first = tracker.record_failure()
    second = tracker.record_failure()
    third = tracker.record_failure()

    assert [first.status, second.status, third.status] == [
        ControllerStatus.DEGRADED,
        ControllerStatus.DEGRADED,
        ControllerStatus.OFFLINE,
    ]
    assert third.failures == 3
    assert third.delay_ms == 5_000

    assert tracker.record_success() is ControllerStatus.ONLINE
    assert tracker.failures == 0
    assert tracker.record_failure().failures == 1


@pytest.mark.unit
def test_tracker_uses_current_error_interval() -> None:
    tracker = FailureTracker()
    for _ in range(13):
        tracker.record_failure()
    tracker.error_interval_ms = 2_000

    assert tracker.record_failure().delay_ms == 4_000

    with pytest.raises(ValueError):
        tracker.error_interval_ms = -1


@pytest.mark.unit
def test_backoff_table_rows() -> None:
    rows = backoff_table(3, 1_000)

    assert [row.failures for row in rows] == [1, 2, 3]
    assert rows[-1].to_dict() == {"failures": 3, "delay_ms": 1_000, "status": "offline"}
    assert backoff_table(0) == ()
