"""Unit tests for the in-memory cooldown gate."""

from unittest.mock import Mock

import pytest

from agency_toolkit.adapters.rate_limit.in_memory import InMemoryRateGate


def test_unknown_key_is_not_limited() -> None:
    gate = InMemoryRateGate(clock=Mock(return_value=1000.0))

    assert gate.is_limited("upload:a1", 60) is False
    assert gate.remaining_seconds("upload:a1", 60) == 0


@pytest.mark.parametrize("window", [0.001, 1, 60, 3600])
def test_limited_immediately_after_mark(window: float) -> None:
    gate = InMemoryRateGate(clock=Mock(return_value=1000.0))

    gate.mark_used("k")

    assert gate.is_limited("k", window) is True


def test_window_example_from_upload_flow() -> None:
    clock = Mock(return_value=0.0)
    gate = InMemoryRateGate(clock=clock)

    gate.mark_used("upload:a1")

    clock.return_value = 30.0
    assert gate.is_limited("upload:a1", 60) is True
    assert gate.remaining_seconds("upload:a1", 60) == 30

    clock.return_value = 61.0
    assert gate.is_limited("upload:a1", 60) is False


def test_window_boundary_is_exclusive() -> None:
    clock = Mock(return_value=100.0)
    gate = InMemoryRateGate(clock=clock)
    gate.mark_used("k")

    clock.return_value = 160.0

    assert gate.is_limited("k", 60) is False
    assert gate.remaining_seconds("k", 60) == 0


def test_remaining_seconds_rounds_up() -> None:
    clock = Mock(return_value=100.0)
    gate = InMemoryRateGate(clock=clock)
    gate.mark_used("k")

    clock.return_value = 100.4
    assert gate.remaining_seconds("k", 60) == 60

    clock.return_value = 159.9
    assert gate.remaining_seconds("k", 60) == 1


def test_remaining_seconds_is_zero_after_window() -> None:
    clock = Mock(return_value=100.0)
    gate = InMemoryRateGate(clock=clock)
    gate.mark_used("k")

    clock.return_value = 200.0

    assert gate.remaining_seconds("k", 60) == 0


def test_mark_used_overwrites_previous_timestamp() -> None:
    clock = Mock(return_value=0.0)
    gate = InMemoryRateGate(clock=clock)
    gate.mark_used("k")

    clock.return_value = 50.0
    gate.mark_used("k")

    clock.return_value = 100.0
    assert gate.is_limited("k", 60) is True
    assert gate.size() == 1


def test_keys_are_isolated() -> None:
    gate = InMemoryRateGate(clock=Mock(return_value=0.0))
    gate.mark_used("upload:a1:loc1")

    assert gate.is_limited("upload:a1:loc2", 60) is False
    assert gate.is_limited("upload:a2:loc1", 60) is False


def test_sweep_removes_stale_entries_when_over_capacity() -> None:
    clock = Mock(return_value=0.0)
    gate = InMemoryRateGate(max_entries=3, retention_seconds=120, clock=clock)
    gate.mark_used("old-1")
    gate.mark_used("old-2")

    clock.return_value = 200.0
    gate.mark_used("new-1")
    assert gate.size() == 3

    gate.mark_used("new-2")

    assert gate.size() == 2
    assert gate.is_limited("new-1", 60) is True
    assert gate.remaining_seconds("old-1", 300) == 0


def test_sweep_keeps_recent_entries() -> None:
    clock = Mock(return_value=0.0)
    gate = InMemoryRateGate(max_entries=2, retention_seconds=120, clock=clock)

    for key in ("a", "b", "c"):
        gate.mark_used(key)

    assert gate.size() == 3


def test_clear_empties_the_gate() -> None:
    gate = InMemoryRateGate(clock=Mock(return_value=0.0))
    gate.mark_used("k")

    gate.clear()

    assert gate.size() == 0
    assert gate.is_limited("k", 60) is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_entries": 0},
        {"retention_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryRateGate(**kwargs)


def test_invalid_call_args() -> None:
    gate = InMemoryRateGate()

    with pytest.raises(ValueError):
        gate.mark_used("")

    with pytest.raises(ValueError):
        gate.is_limited("", 60)

    with pytest.raises(ValueError):
        gate.remaining_seconds("k", 0)
