"""Process status reporting."""

import resource
import sys
from datetime import UTC, datetime


def format_uptime(launched: datetime, now: datetime | None = None) -> str:
    """Format the elapsed time since launch, e.g. '1 day 2 hours 3 minutes 4 seconds'."""
    current = now or datetime.now(tz=UTC)
    total = max(int((current - launched).total_seconds()), 0)
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)
    parts = []
    for value, unit in ((days, "day"), (hours, "hour"), (minutes, "minute")):
        if value:
            parts.append(f"{value} {unit}{'s' if value != 1 else ''}")
    parts.append(f"{seconds} second{'s' if seconds != 1 else ''}")
    return " ".join(parts)


def format_memory_usage() -> str:
    """Return the peak resident set size of this process."""
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is reported in bytes on macOS and in kilobytes elsewhere
    peak_bytes = peak if sys.platform == "darwin" else peak * 1024
    return f"{_format_bytes(peak_bytes)} (peak RSS)"


def _format_bytes(value: int) -> str:
    size = float(value)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def status_text(launched: datetime, now: datetime | None = None) -> str:
    """Build the user-facing status message."""
    return (
        f"Uptime: {format_uptime(launched, now)}\n"
        f"Memory Usage: {format_memory_usage()}"
    )
