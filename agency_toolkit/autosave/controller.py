"""Debounced autosave for in-memory edit state.

The controller watches a snapshot of editable data. Every change restarts a
debounce timer; when the timer fires (or the caller flushes) the latest
snapshot is handed to an async save function. At most one save runs at a
time. Changes arriving while a save is in flight are kept and trigger a
follow-up debounced save once the in-flight one settles.

Everything runs on a single asyncio event loop: ``update`` must be called
from a coroutine or callback running on that loop.

Usage:
    async with AutosaveController(form, save=client.save_form) as autosave:
        autosave.update({**form, "name": "New name"})
        ...
        await autosave.flush()
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Generic, TypeVar

from agency_toolkit.autosave.status import SaveStatus, check_transition

logger = logging.getLogger(__name__)

T = TypeVar("T")

SaveFunction = Callable[[T], Awaitable[bool]]

DEFAULT_DEBOUNCE_SECONDS = 0.8


def snapshot_fingerprint(data: Any) -> str:
    """Canonical JSON form of ``data`` used for structural comparison."""
    return json.dumps(data, sort_keys=True, default=str, separators=(",", ":"))


class AutosaveController(Generic[T]):
    """Debounce edits into single save calls and track their outcome.

    Attributes:
        status: Current ``SaveStatus``.
        last_saved_at: UTC time of the last successful save, or None.
    """

    def __init__(
        self,
        data: T,
        save: SaveFunction[T],
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        enabled: bool = True,
        name: str = "autosave",
    ) -> None:
        """Start a session with ``data`` as the already-persisted baseline.

        Args:
            data: Current snapshot of the editable data. Never saved by itself.
            save: Coroutine function persisting a snapshot; returns success.
            debounce_seconds: Quiet period before a change is persisted.
            enabled: When False, changes are recorded but not scheduled.
            name: Label included in log records.

        Raises:
            ValueError: If debounce_seconds is negative.
        """
        if debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0")

        self._data = data
        self._fingerprint = snapshot_fingerprint(data)
        self._save_fn = save
        self._debounce_seconds = debounce_seconds
        self._enabled = enabled
        self._name = name

        self._status = SaveStatus.IDLE
        self._last_saved_at: datetime | None = None
        self._dirty = False
        self._saving = False
        self._closed = False
        self._timer: asyncio.TimerHandle | None = None
        self._save_task: asyncio.Task[None] | None = None
        self._inflight: asyncio.Future[None] | None = None

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def last_saved_at(self) -> datetime | None:
        return self._last_saved_at

    @property
    def data(self) -> T:
        return self._data

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def has_pending_save(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def update(self, data: T) -> bool:
        """Record a new snapshot.

        Structurally equal snapshots are ignored. A real change cancels any
        pending timer, marks the session dirty and schedules a new save.

        Returns:
            True if the snapshot differed from the previous one.
        """
        fingerprint = snapshot_fingerprint(data)
        if fingerprint == self._fingerprint:
            return False

        self._data = data
        self._fingerprint = fingerprint
        self._dirty = True

        if self._closed or not self._enabled:
            return True

        self._cancel_timer()
        if self._status is not SaveStatus.SAVING:
            self._set_status(SaveStatus.IDLE)
        self._schedule()
        return True

    def mark_unsaved(self) -> None:
        """Flag the session as having unsaved changes without scheduling."""
        self._dirty = True
        if self._status is not SaveStatus.SAVING:
            self._set_status(SaveStatus.IDLE)

    def set_enabled(self, enabled: bool) -> None:
        """Toggle autosaving; re-enabling with unsaved changes schedules a save."""
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if not enabled:
            self._cancel_timer()
        elif self._dirty and not self._closed:
            self._schedule()

    async def flush(self) -> None:
        """Cancel the pending timer and save the latest snapshot now.

        Dropped (returns immediately) when a save is already in flight.
        """
        self._cancel_timer()
        await self._save()

    def close(self) -> None:
        """End the session: no timer fires after this. Idempotent."""
        self._closed = True
        self._cancel_timer()

    async def aclose(self) -> None:
        """Close and wait for an in-flight save to settle."""
        self.close()
        inflight = self._inflight
        if inflight is not None and not inflight.done():
            await asyncio.shield(inflight)

    async def __aenter__(self) -> "AutosaveController[T]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _set_status(self, status: SaveStatus) -> None:
        previous = self._status
        self._status = check_transition(previous, status)
        if previous is not status:
            logger.debug(
                "autosave.status",
                extra={"session": self._name, "from": previous.value, "to": status.value},
            )

    def _schedule(self) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce_seconds, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed:
            return
        if self._saving:
            # _settle reschedules once the in-flight save finishes.
            logger.debug("autosave.dropped", extra={"session": self._name, "reason": "in_flight"})
            return
        self._save_task = asyncio.get_running_loop().create_task(self._save())

    async def _save(self) -> None:
        if self._saving:
            logger.debug("autosave.dropped", extra={"session": self._name, "reason": "in_flight"})
            return

        self._saving = True
        # Settled by whichever task runs the save, timer or flush.
        self._inflight = asyncio.get_running_loop().create_future()
        snapshot, fingerprint = self._data, self._fingerprint
        self._dirty = False
        self._set_status(SaveStatus.SAVING)

        ok = False
        try:
            ok = bool(await self._save_fn(snapshot))
            if not ok:
                logger.warning("autosave.rejected", extra={"session": self._name})
        except Exception as exc:
            logger.error(
                "autosave.failed",
                extra={
                    "session": self._name,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
        finally:
            self._saving = False
            inflight, self._inflight = self._inflight, None
            try:
                self._settle(ok, fingerprint)
            finally:
                inflight.set_result(None)

    def _settle(self, ok: bool, saved_fingerprint: str) -> None:
        if ok:
            self._set_status(SaveStatus.SAVED)
            self._last_saved_at = datetime.now(timezone.utc)
            logger.info("autosave.saved", extra={"session": self._name})
        else:
            self._set_status(SaveStatus.ERROR)
            self._dirty = True

        if self._fingerprint == saved_fingerprint:
            return

        # Edited while the save was in flight.
        self._dirty = True
        self._set_status(SaveStatus.IDLE)
        if self._timer is None and self._enabled and not self._closed:
            self._schedule()
