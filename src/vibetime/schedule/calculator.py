"""
Schedule Calculator

Pure functions deciding when the recurring buzz fires.

A buzz fires on every minute m of the hour with m >= start_minute and
(m - start_minute) divisible by the interval, at second 0. For example
interval=15, start_minute=3 fires at :03, :18, :33 and :48.

Minutes past the end of the current hour are expressed on a 60-119 scale
so countdown arithmetic stays a plain subtraction.
"""

from typing import NamedTuple


class ScheduleState(NamedTuple):
    """Derived schedule snapshot for one clock tick."""

    next_buzz_minute: int
    minutes_left: int
    seconds_left: int


def _is_buzz_minute(minute: int, start_minute: int, interval: int) -> bool:
    return minute >= start_minute and (minute - start_minute) % interval == 0


def next_buzz_minute(current_minute: int, start_minute: int, interval: int) -> int:
    """
    First buzz minute at or after current_minute.

    Args:
        current_minute: Minute to search from (0-59, or 60 for "past this hour")
        start_minute: Schedule phase offset (0-59)
        interval: Minutes between buzzes (1-60)

    Returns:
        The buzz minute within this hour, or start_minute + 60 when the
        next buzz is in the following hour

    Example:
        >>> next_buzz_minute(58, 0, 5)
        60
    """
    for minute in range(current_minute, 60):
        if _is_buzz_minute(minute, start_minute, interval):
            return minute
    return start_minute + 60


def should_fire_now(
    current_minute: int, current_second: int, start_minute: int, interval: int
) -> bool:
    """
    Whether the buzz fires at this exact second.

    Gated on second 0, so sampling once per second fires at most once per
    qualifying minute.
    """
    return current_second == 0 and _is_buzz_minute(current_minute, start_minute, interval)


def _target_minute(
    current_minute: int, current_second: int, start_minute: int, interval: int
) -> int:
    target = next_buzz_minute(current_minute, start_minute, interval)
    if target == current_minute and current_second > 0:
        # This minute's buzz already went off
        target = next_buzz_minute(current_minute + 1, start_minute, interval)
    return target


def countdown(
    current_minute: int, current_second: int, start_minute: int, interval: int
) -> tuple[int, int]:
    """
    Time left until the next buzz.

    Returns:
        (minutes_left, seconds_left) to the start of the next buzz minute

    Example:
        >>> countdown(3, 20, 0, 5)
        (1, 40)
    """
    target = _target_minute(current_minute, current_second, start_minute, interval)
    remaining = (target - current_minute) * 60 - current_second
    minutes_left, seconds_left = divmod(remaining, 60)
    return minutes_left, seconds_left


def schedule_state(
    current_minute: int, current_second: int, start_minute: int, interval: int
) -> ScheduleState:
    """Next buzz minute and countdown for one tick."""
    target = _target_minute(current_minute, current_second, start_minute, interval)
    minutes_left, seconds_left = countdown(current_minute, current_second, start_minute, interval)
    return ScheduleState(target, minutes_left, seconds_left)
