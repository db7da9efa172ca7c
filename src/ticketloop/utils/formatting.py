"""Formatting utilities for durations and timestamps."""

import time
from typing import Optional


def fmt_duration(seconds: float) -> str:
    """Format duration as human readable string."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        mins, secs = divmod(int(seconds), 60)
        return f"{mins}m {secs}s"
    else:
        hours, remainder = divmod(int(seconds), 3600)
        mins, secs = divmod(remainder, 60)
        return f"{hours}h {mins}m {secs}s"


def fmt_clock(timestamp: Optional[float]) -> str:
    """Format an epoch timestamp as local HH:MM:SS, '-' when unset."""
    if timestamp is None:
        return "-"
    return time.strftime("%H:%M:%S", time.localtime(timestamp))


def truncate(text: str, limit: int = 70) -> str:
    """Single-line preview of text, with an ellipsis when cut."""
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[:limit] + "..."
