from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional


def format_time(ms: int) -> str:
    """Formats a duration as '<seconds>.<hundredths>s', truncating (1234 -> '1.23s')."""
    if ms < 0:
        raise ValueError('duration must be non-negative')
    ms = int(ms)
    seconds = ms // 1000
    hundredths = (ms % 1000) // 10
    return f"{seconds}.{hundredths:02d}s"


def format_date(date: datetime, tz: Optional[tzinfo] = None) -> str:
    """Leaderboard date display, converted to tz (local time when omitted)."""
    return date.astimezone(tz).strftime('%Y/%m/%d %H:%M:%S')
