"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def report_timestamp(now: dt.datetime | None = None) -> str:
    """Return a filename-safe UTC timestamp such as ``20250102T030405Z``."""
    moment = (now or utcnow()).astimezone(dt.UTC)
    return moment.strftime("%Y%m%dT%H%M%SZ")
