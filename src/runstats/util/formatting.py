# runstats/util/formatting.py
"""
Human-readable durations for reports.
"""

from __future__ import annotations

import datetime as dt


def format_time(seconds: int) -> str:
    """
    Format whole seconds as "M:S", "H:M:S" or "Dd H:M:S".

    Fields are not zero-padded: 1415 -> "23:35", 386615 -> "4d 11:23:35".
    """
    seconds = max(0, int(seconds))
    secs = seconds % 60
    minutes = (seconds // 60) % 60
    hours = (seconds // 3600) % 24
    days = seconds // (3600 * 24)

    if days > 0:
        return f"{days}d {hours}:{minutes}:{secs}"
    if hours > 0:
        return f"{hours}:{minutes}:{secs}"
    return f"{minutes}:{secs}"


def format_duration(duration: dt.timedelta) -> str:
    return format_time(int(duration.total_seconds()))
