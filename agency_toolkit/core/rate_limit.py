"""Cooldown gate wiring for the HTTP layer.

Routes and services never build a gate themselves: they call
``check_rate_gate`` before the guarded action and ``mark_rate_gate`` after it
succeeded, so a failed attempt does not start a cooldown.

Gate keys are namespaced by action and tenant, e.g.
``upload:<agency_id>:<location_id>``.
"""

from __future__ import annotations

import hashlib
import logging

from agency_toolkit.adapters.rate_limit.base import AbstractRateGate
from agency_toolkit.adapters.rate_limit.in_memory import InMemoryRateGate
from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import RateLimitedAppError

logger = logging.getLogger(__name__)


_gate: AbstractRateGate | None = None
_gate_config: tuple[int, int] | None = None


def get_rate_gate() -> AbstractRateGate:
    """Return the process-wide gate instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the gate is rebuilt.
    """

    global _gate, _gate_config

    config = (settings.rate_gate.max_entries, settings.rate_gate.retention_seconds)

    if _gate is None or _gate_config != config:
        _gate = InMemoryRateGate(
            max_entries=settings.rate_gate.max_entries,
            retention_seconds=settings.rate_gate.retention_seconds,
        )
        _gate_config = config

    return _gate


def reset_rate_gate() -> None:
    """Drop the cached gate so the next call starts from an empty map."""

    global _gate, _gate_config
    _gate = None
    _gate_config = None


def build_gate_key(action: str, *parts: str) -> str:
    return ":".join((action, *parts))


def _hash_gate_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def check_rate_gate(key: str, window_seconds: int) -> None:
    """Raise when ``key`` is still cooling down.

    Args:
        key: Namespaced gate key.
        window_seconds: Cooldown length for this action.

    Raises:
        RateLimitedAppError: 429 with ``retry_after`` seconds when limited.
    """

    if not settings.rate_gate.enabled:
        return

    gate = get_rate_gate()
    if not gate.is_limited(key, window_seconds):
        return

    retry_after = gate.remaining_seconds(key, window_seconds)
    logger.warning(
        "rate_gate.limited",
        extra={
            "key_hash": _hash_gate_key(key),
            "window_s": window_seconds,
            "retry_after_s": retry_after,
        },
    )
    raise RateLimitedAppError(
        code="rate_limited",
        message="Please wait before trying again",
        retry_after=retry_after,
    )


def mark_rate_gate(key: str) -> None:
    """Start the cooldown for ``key``."""

    if not settings.rate_gate.enabled:
        return
    get_rate_gate().mark_used(key)
    logger.debug("rate_gate.marked", extra={"key_hash": _hash_gate_key(key)})
