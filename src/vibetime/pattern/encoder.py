"""
Tally Encoder and Pattern Builder

Turns an (hour, minute) pair into an ordered sequence of pulse and gap
events using a tally system:

    LONG  = tally_base units (5 or 10)
    SHORT = 1 unit

Example (base 5): 14:37 -> hour 2 LONG + 4 SHORT, separator, minute
7 LONG + 2 SHORT.

A component whose value is 0 produces no pulses at all. When both
components are silent the pattern is empty, which callers treat as
"no vibration".
"""

from typing import NamedTuple, Optional

from .enums import GapKind, PulseKind
from .models import GapEvent, Pattern, PatternEvent, PulseEvent, TimingProfile, VibeConfig

# Android VibrationEffect amplitudes
LONG_AMPLITUDE = 255
SHORT_AMPLITUDE = 128

# Sample times offered by the shell for trying the encoding out
TEST_TIMES = ((0, 0), (8, 5), (14, 37), (23, 59))


class TallyCount(NamedTuple):
    """Number of LONG and SHORT pulses encoding one value."""

    longs: int
    shorts: int


def encode(n: int, base: int) -> TallyCount:
    """
    Split a non-negative integer into tally units.

    Args:
        n: Value to encode (hour or minute, never negative)
        base: Units per LONG pulse

    Returns:
        TallyCount with longs * base + shorts == n and 0 <= shorts < base

    Example:
        >>> encode(37, 5)
        TallyCount(longs=7, shorts=2)
        >>> encode(14, 10)
        TallyCount(longs=1, shorts=4)
    """
    longs, shorts = divmod(n, base)
    return TallyCount(longs, shorts)


def to_12_hour(hour: int) -> int:
    """Convert a 0-23 hour to the 1-12 clock face (0 -> 12, 13 -> 1)."""
    if hour == 0:
        return 12
    if hour > 12:
        return hour - 12
    return hour


def encoded_hour(hour: int, config: VibeConfig) -> int:
    """The hour value that is actually felt under this config."""
    return to_12_hour(hour) if config.use_12_hour_format else hour


def _gap(kind: GapKind, timing: TimingProfile) -> GapEvent:
    return GapEvent(kind=kind, duration_ms=timing.gap_duration_ms(kind))


def _number_events(n: int, base: int, timing: TimingProfile) -> list[PatternEvent]:
    """Expand a value into LONG pulses then SHORT pulses with gaps in between."""
    count = encode(n, base)
    kinds = [PulseKind.LONG] * count.longs + [PulseKind.SHORT] * count.shorts

    events: list[PatternEvent] = []
    for kind in kinds:
        if events:
            events.append(_gap(GapKind.INTER_PULSE, timing))
        events.append(PulseEvent(kind=kind, duration_ms=timing.pulse_duration_ms(kind)))
    return events


def build_pattern(
    hour: int,
    minute: int,
    config: VibeConfig,
    timing: Optional[TimingProfile] = None,
) -> Pattern:
    """
    Build the pulse pattern for a time of day.

    Args:
        hour: Hour of day, 0-23
        minute: Minute of hour, 0-59
        config: Encoding configuration snapshot
        timing: Durations to use (default: TimingProfile())

    Returns:
        Immutable tuple of PulseEvent/GapEvent, possibly empty
    """
    timing = timing or TimingProfile()
    h = encoded_hour(hour, config)

    events: list[PatternEvent] = []

    if config.include_hours and h > 0:
        events.extend(_number_events(h, config.tally_base, timing))

    if config.include_minutes and minute > 0:
        if events:
            events.append(_gap(GapKind.SEPARATOR, timing))
        events.extend(_number_events(minute, config.tally_base, timing))

    return tuple(events)


def _describe_number(n: int, label: str, base: int) -> str:
    if n == 0:
        return f"{label} {n}: (none)"

    count = encode(n, base)
    components = []
    if count.longs > 0:
        components.append(f"{count.longs}L")
    if count.shorts > 0:
        components.append(f"{count.shorts}S")

    return f"{label} {n}: {'+'.join(components)}"


def describe_pattern(hour: int, minute: int, config: VibeConfig) -> str:
    """
    Human-readable summary of the pattern for a time.

    Example:
        >>> describe_pattern(14, 37, VibeConfig())
        'Hour 14: 2L+4S | Min 37: 7L+2S'
    """
    parts = []

    if config.include_hours:
        parts.append(_describe_number(encoded_hour(hour, config), "Hour", config.tally_base))

    if config.include_minutes:
        parts.append(_describe_number(minute, "Min", config.tally_base))

    return " | ".join(parts)


def pattern_duration_ms(pattern: Pattern) -> int:
    """Total wall-clock duration of a pattern (pulses + gaps)."""
    return sum(event.duration_ms for event in pattern)


def to_waveform(pattern: Pattern) -> tuple[list[int], list[int]]:
    """
    Convert a pattern to waveform arrays for platform vibrators.

    Returns:
        (timings, amplitudes) where timings starts with a 0ms delay and
        amplitudes holds 255 for LONG, 128 for SHORT and 0 for gaps.
    """
    timings = [0]
    amplitudes = [0]

    for event in pattern:
        timings.append(event.duration_ms)
        if isinstance(event, PulseEvent):
            amplitudes.append(LONG_AMPLITUDE if event.kind == PulseKind.LONG else SHORT_AMPLITUDE)
        else:
            amplitudes.append(0)

    return timings, amplitudes


def vibration_status(hour: int, minute: int, config: VibeConfig) -> Optional[str]:
    """
    Pre-flight message the shell shows instead of vibrating.

    Returns:
        A status message when nothing would be felt, None otherwise
    """
    if not config.include_hours and not config.include_minutes:
        return "Enable hours or minutes!"

    has_hour = config.include_hours and encoded_hour(hour, config) > 0
    has_minute = config.include_minutes and minute > 0
    if not has_hour and not has_minute:
        return "No vibration (value is 0)"

    return None
