"""
Time parsing utilities for clock times.

Parses the "HH:MM" strings accepted by the debug CLI into (hour, minute)
pairs, with "now" resolving to the local wall clock.
"""

from datetime import datetime
from typing import Callable, Optional


def parse_clock_time(
    time_str: str, clock: Optional[Callable[[], datetime]] = None
) -> tuple[int, int]:
    """
    Parse a clock time string into an (hour, minute) pair.

    Supports:
    - 24-hour "HH:MM": "14:37", "8:05", "00:00"
    - Keyword: "now" (local time)

    Args:
        time_str: The time string to parse (case-insensitive for keywords)
        clock: Time source for "now" (default: datetime.now)

    Returns:
        (hour, minute) with hour in 0-23 and minute in 0-59

    Raises:
        ValueError: If the string is malformed or out of range

    Examples:
        >>> parse_clock_time("14:37")
        (14, 37)
    """
    time_str = time_str.strip()

    if time_str.lower() == "now":
        now = (clock or datetime.now)()
        return now.hour, now.minute

    parts = time_str.split(":")
    if len(parts) != 2:
        raise ValueError(
            f"Could not parse time string: '{time_str}'. " f"Supported formats: 'HH:MM', 'now'"
        )

    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError:
        raise ValueError(
            f"Invalid time string: '{time_str}'. " f"Hour and minute must be integers."
        )

    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range in '{time_str}': must be 0-23")
    if not 0 <= minute <= 59:
        raise ValueError(f"Minute out of range in '{time_str}': must be 0-59")

    return hour, minute
