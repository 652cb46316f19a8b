"""
Pulse Pattern Models

Pydantic value objects for encoding configuration, timing and the events
that make up a pattern.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import GapKind, PulseKind


class VibeConfig(BaseModel):
    """
    Encoding and schedule configuration.

    A VibeConfig is an immutable snapshot: the settings surface replaces it
    wholesale, and every build/execute call works against the snapshot it
    was handed.
    """

    model_config = ConfigDict(frozen=True)

    use_12_hour_format: bool = Field(
        default=False,
        description="Convert hours to 1-12 before encoding (changes what is felt)",
    )
    include_hours: bool = Field(default=True, description="Encode the hour component")
    include_minutes: bool = Field(default=True, description="Encode the minute component")
    tally_base: Literal[5, 10] = Field(
        default=5,
        description="Units represented by one LONG pulse",
    )
    buzz_interval: int = Field(
        default=15,
        ge=1,
        le=60,
        description="Minutes between scheduled buzzes",
    )
    start_minute: int = Field(
        default=0,
        ge=0,
        le=59,
        description="Phase offset of the buzz schedule within the hour",
    )
    audio_enabled: bool = Field(
        default=False,
        description="Pair every pulse with a tone",
    )


class TimingProfile(BaseModel):
    """
    Durations used when building a pattern, in milliseconds.

    Defaults match the reference hardware feel: 250ms long, 100ms short,
    70ms between pulses and 400ms between the hour and the minute.
    """

    model_config = ConfigDict(frozen=True)

    long_pulse_ms: int = Field(default=250, gt=0)
    short_pulse_ms: int = Field(default=100, gt=0)
    inter_pulse_gap_ms: int = Field(default=70, gt=0)
    separator_gap_ms: int = Field(default=400, gt=0)

    def pulse_duration_ms(self, kind: PulseKind) -> int:
        """Duration of a pulse of the given kind."""
        if kind == PulseKind.LONG:
            return self.long_pulse_ms
        return self.short_pulse_ms

    def gap_duration_ms(self, kind: GapKind) -> int:
        """Duration of a gap of the given kind."""
        if kind == GapKind.SEPARATOR:
            return self.separator_gap_ms
        return self.inter_pulse_gap_ms


class PulseEvent(BaseModel):
    """An output instant: one haptic pulse (and optional tone)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pulse"] = "pulse"
    kind: PulseKind
    duration_ms: int = Field(..., gt=0)


class GapEvent(BaseModel):
    """A silent wait between pulses."""

    model_config = ConfigDict(frozen=True)

    type: Literal["gap"] = "gap"
    kind: GapKind
    duration_ms: int = Field(..., gt=0)


PatternEvent = Annotated[Union[PulseEvent, GapEvent], Field(discriminator="type")]

# An empty pattern means "nothing to feel".
Pattern = tuple[PatternEvent, ...]
