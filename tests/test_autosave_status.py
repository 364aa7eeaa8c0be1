from __future__ import annotations

import pytest

from agency_toolkit.autosave.status import (
    TRANSITIONS,
    InvalidTransitionError,
    SaveStatus,
    check_transition,
)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SaveStatus.IDLE, SaveStatus.SAVING),
        (SaveStatus.SAVING, SaveStatus.SAVED),
        (SaveStatus.SAVING, SaveStatus.ERROR),
        (SaveStatus.SAVED, SaveStatus.IDLE),
        (SaveStatus.ERROR, SaveStatus.IDLE),
        (SaveStatus.ERROR, SaveStatus.SAVING),
    ],
)
def test_allowed_transitions(current: SaveStatus, target: SaveStatus) -> None:
    assert check_transition(current, target) is target


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SaveStatus.SAVING, SaveStatus.SAVING),
        (SaveStatus.SAVING, SaveStatus.IDLE),
        (SaveStatus.IDLE, SaveStatus.SAVED),
        (SaveStatus.IDLE, SaveStatus.ERROR),
    ],
)
def test_rejected_transitions(current: SaveStatus, target: SaveStatus) -> None:
    with pytest.raises(InvalidTransitionError) as exc_info:
        check_transition(current, target)

    assert exc_info.value.current is current
    assert exc_info.value.target is target


def test_every_status_has_transitions() -> None:
    assert set(TRANSITIONS) == set(SaveStatus)


def test_status_values_are_strings() -> None:
    assert SaveStatus.SAVED == "saved"
    assert SaveStatus("error") is SaveStatus.ERROR
