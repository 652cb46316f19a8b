"""
Buzz Schedule

Recurring buzz calculations and the daemon that fires them.
"""

from .calculator import ScheduleState, countdown, next_buzz_minute, schedule_state, should_fire_now

__all__ = ["ScheduleState", "countdown", "next_buzz_minute", "schedule_state", "should_fire_now"]
