"""In-memory cooldown gate.

Notes:
- Per-process only: every worker process keeps its own map, so a
  multi-instance deployment sees independent windows per instance.
- Thread-safe: uses a lock around shared state.
- No timer: stale entries are swept when the map grows past ``max_entries``.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from agency_toolkit.adapters.rate_limit.base import AbstractRateGate

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 10_000
DEFAULT_RETENTION_SECONDS = 120


class InMemoryRateGate(AbstractRateGate):
    """Cooldown gate storing the last action timestamp per key.

    Important:
        State lives in this object only. It is lost on restart and is not
        shared between processes.
    """

    def __init__(
        self,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the gate.

        Args:
            max_entries: Map size above which a sweep runs on ``mark_used``.
            retention_seconds: Entries older than this are dropped by a sweep.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If max_entries or retention_seconds are invalid.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if retention_seconds <= 0:
            raise ValueError("retention_seconds must be > 0")

        self._max_entries = max_entries
        self._retention_seconds = retention_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._last_action_at: dict[str, float] = {}

    @staticmethod
    def _check_args(key: str, window_seconds: float) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

    def is_limited(self, key: str, window_seconds: float) -> bool:
        self._check_args(key, window_seconds)
        now = self._clock()
        with self._lock:
            last = self._last_action_at.get(key)
        return last is not None and now - last < window_seconds

    def mark_used(self, key: str) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")
        now = self._clock()
        with self._lock:
            self._last_action_at[key] = now
            if len(self._last_action_at) > self._max_entries:
                self._sweep_locked(now)

    def remaining_seconds(self, key: str, window_seconds: float) -> int:
        self._check_args(key, window_seconds)
        now = self._clock()
        with self._lock:
            last = self._last_action_at.get(key)
        if last is None:
            return 0
        remaining = window_seconds - (now - last)
        return int(math.ceil(remaining)) if remaining > 0 else 0

    def size(self) -> int:
        with self._lock:
            return len(self._last_action_at)

    def clear(self) -> None:
        with self._lock:
            self._last_action_at.clear()

    def _sweep_locked(self, now: float) -> None:
        cutoff = now - self._retention_seconds
        stale = [k for k, ts in self._last_action_at.items() if ts < cutoff]
        for key in stale:
            del self._last_action_at[key]
        logger.info(
            "rate_gate.swept",
            extra={"removed": len(stale), "remaining_entries": len(self._last_action_at)},
        )
