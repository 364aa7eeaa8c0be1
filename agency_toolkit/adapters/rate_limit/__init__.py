"""Rate gate adapters.

Callers depend on the abstract gate so the in-process map can later be
replaced by a shared cache (e.g. Redis) without touching the API layer.
"""

from agency_toolkit.adapters.rate_limit.base import AbstractRateGate
from agency_toolkit.adapters.rate_limit.in_memory import InMemoryRateGate

__all__ = ["AbstractRateGate", "InMemoryRateGate"]
