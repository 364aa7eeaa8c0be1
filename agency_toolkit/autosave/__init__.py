from __future__ import annotations

from agency_toolkit.autosave.controller import AutosaveController, snapshot_fingerprint
from agency_toolkit.autosave.status import InvalidTransitionError, SaveStatus

__all__ = [
    "AutosaveController",
    "InvalidTransitionError",
    "SaveStatus",
    "snapshot_fingerprint",
]
