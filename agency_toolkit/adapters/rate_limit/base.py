"""Rate gate interface.

A rate gate answers one question per key: "was this action performed less
than ``window_seconds`` ago?". It is a soft burst smoother, not a security
boundary.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractRateGate(ABC):
    """Interface for cooldown gates keyed by caller-supplied strings."""

    @abstractmethod
    def is_limited(self, key: str, window_seconds: float) -> bool:
        """Return True while ``key`` is inside its cooldown window.

        Args:
            key: Namespaced identifier, e.g. ``"upload:<agency>:<location>"``.
            window_seconds: Cooldown length in seconds.
        """
        raise NotImplementedError

    @abstractmethod
    def mark_used(self, key: str) -> None:
        """Record that the action for ``key`` happened now."""
        raise NotImplementedError

    @abstractmethod
    def remaining_seconds(self, key: str, window_seconds: float) -> int:
        """Whole seconds until ``key`` leaves its window (0 when free)."""
        raise NotImplementedError
