"""
Small precondition helpers shared by the public API entry points.
"""

from typing import Optional


def is_blank(value: Optional[str]) -> bool:
    """True for None, the empty string and whitespace-only strings."""
    return value is None or not value.strip()


def require_not_blank(value: Optional[str], name: str) -> str:
    """
    Returns `value` unchanged, or raises ValueError if it is blank.

    Raised before any I/O so callers get a local failure for bad input.
    """
    if is_blank(value):
        raise ValueError(f"{name} must not be blank.")
    return value


def require_in_range(value: int, name: str, minimum: int, maximum: int) -> int:
    """Returns `value` if `minimum <= value <= maximum`, otherwise raises ValueError."""
    if value < minimum or value > maximum:
        raise ValueError(
            f"{name} must be between {minimum} and {maximum} (value={value})"
        )
    return value
