from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from agency_toolkit.utils.time_format import format_time_ago

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=0), "1 minute ago"),
        (timedelta(seconds=59), "1 minute ago"),
        (timedelta(seconds=61), "2 minutes ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(minutes=59), "59 minutes ago"),
        (timedelta(minutes=60), "1 hour ago"),
        (timedelta(hours=5), "5 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=6), "6 days ago"),
        (timedelta(days=7), "1 week ago"),
        (timedelta(days=29), "4 weeks ago"),
        (timedelta(days=30), "1 month ago"),
        (timedelta(days=200), "6 months ago"),
        (timedelta(days=365), "1 year ago"),
        (timedelta(days=800), "2 years ago"),
    ],
)
def test_format_time_ago(delta: timedelta, expected: str) -> None:
    assert format_time_ago(NOW - delta, NOW) == expected


def test_naive_datetimes_are_utc() -> None:
    naive = (NOW - timedelta(hours=3)).replace(tzinfo=None)

    assert format_time_ago(naive, NOW) == "3 hours ago"


def test_defaults_to_current_time() -> None:
    assert format_time_ago(datetime.now(timezone.utc)) == "1 minute ago"
