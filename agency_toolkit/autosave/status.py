"""Save status state machine for debounced edit sessions."""

from __future__ import annotations

from enum import Enum


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


# saving -> saving is deliberately absent: only one save may be in flight.
TRANSITIONS: dict[SaveStatus, frozenset[SaveStatus]] = {
    SaveStatus.IDLE: frozenset({SaveStatus.IDLE, SaveStatus.SAVING}),
    SaveStatus.SAVING: frozenset({SaveStatus.SAVED, SaveStatus.ERROR}),
    # A new change marks the session dirty again; an explicit flush re-saves.
    SaveStatus.SAVED: frozenset({SaveStatus.IDLE, SaveStatus.SAVING}),
    SaveStatus.ERROR: frozenset({SaveStatus.IDLE, SaveStatus.SAVING}),
}


class InvalidTransitionError(RuntimeError):
    """Raised when a status change is not allowed by ``TRANSITIONS``."""

    def __init__(self, current: SaveStatus, target: SaveStatus) -> None:
        super().__init__(f"cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


def check_transition(current: SaveStatus, target: SaveStatus) -> SaveStatus:
    """Return ``target`` if ``current -> target`` is allowed, else raise."""
    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(current, target)
    return target
