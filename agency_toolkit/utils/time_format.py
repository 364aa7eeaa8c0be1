"""Relative time rendering used for notification timestamps."""

from __future__ import annotations

import math
from datetime import datetime, timezone


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Render ``moment`` relative to ``now``, e.g. ``"5 minutes ago"``.

    Anything under a minute reads ``"1 minute ago"`` and minutes are rounded
    up. Months are 30 days and years 365 days. Naive datetimes are treated as
    UTC.

    Args:
        moment: Point in time to describe.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Human-readable relative time.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = math.floor((now - moment).total_seconds())
    minutes = math.ceil(seconds / 60)
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "1 minute ago"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    if days < 30:
        return _plural(days // 7, "week")
    if days // 30 < 12:
        return _plural(days // 30, "month")
    return _plural(days // 365, "year")
