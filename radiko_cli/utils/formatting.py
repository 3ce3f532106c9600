"""
Helper functions for formatting data into human-readable strings.
"""

from datetime import datetime


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_time_range(start: datetime, end: datetime) -> str:
    """Formats a broadcast slot, e.g. '2025-12-22 10:00-10:05'."""
    return f"{start:%Y-%m-%d %H:%M}-{end:%H:%M}"


def parse_timestamp(value: str) -> datetime:
    """
    Parses a command-line timestamp.

    Accepts radiko's 'YYYYMMDDhhmm[ss]' form as well as ISO 8601.
    """
    digits = value.strip()
    if digits.isdigit():
        if len(digits) == 12:
            return datetime.strptime(digits, "%Y%m%d%H%M")
        if len(digits) == 14:
            return datetime.strptime(digits, "%Y%m%d%H%M%S")
        raise ValueError(f"Invalid timestamp: {value!r}")
    return datetime.fromisoformat(digits)
