"""
Pulse Pattern Enums

Type-safe enumerations for the pulse and gap kinds that make up a pattern.
"""

from enum import Enum


class PulseKind(str, Enum):
    """
    Kinds of haptic pulse in a tally pattern.

    A LONG pulse stands for `tally_base` units (5 or 10), a SHORT pulse
    stands for a single unit. The two must be distinguishable by feel, so
    they differ both in duration and in amplitude.
    """

    LONG = "long"  # Heavy impact, tally_base units
    SHORT = "short"  # Light impact, 1 unit

    def __str__(self) -> str:
        """Return the string value for easy serialization."""
        return self.value


class GapKind(str, Enum):
    """
    Kinds of silent wait in a pattern.

    INTER_PULSE separates consecutive pulses of the same number.
    SEPARATOR sits between the hour sub-pattern and the minute sub-pattern.
    """

    INTER_PULSE = "inter_pulse"
    SEPARATOR = "separator"

    def __str__(self) -> str:
        """Return the string value for easy serialization."""
        return self.value


class FeelOutcome(str, Enum):
    """
    Outcome of a request to play the time.

    ACCEPTED -> pattern started on the executor
    DROPPED  -> another pattern was already playing
    EMPTY    -> nothing to feel (values are 0 or both components disabled)
    """

    ACCEPTED = "accepted"
    DROPPED = "dropped"
    EMPTY = "empty"

    def __str__(self) -> str:
        """Return the string value for easy serialization."""
        return self.value
