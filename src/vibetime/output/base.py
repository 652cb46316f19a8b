"""Base class for haptic/audio output backends."""

from abc import ABC, abstractmethod
from typing import Optional

from vibetime.pattern.enums import PulseKind

# Two tones, an octave apart, so LONG and SHORT are told apart by ear
TONE_FREQUENCIES_HZ = {
    PulseKind.LONG: 440,
    PulseKind.SHORT: 880,
}


class OutputBackend(ABC):
    """Abstract base class for output capabilities.

    Implementations must:
    - Never raise exceptions from trigger_haptic_pulse()/play_tone()
    - Be constructable from environment variables via from_env()
    """

    @abstractmethod
    def trigger_haptic_pulse(self, kind: PulseKind, duration_ms: int) -> None:
        """Start a haptic pulse. Must return immediately and never raise."""
        ...

    @abstractmethod
    def play_tone(self, kind: PulseKind, duration_ms: int) -> None:
        """Start a tone for the pulse kind. Must return immediately and never raise."""
        ...

    def complete(self) -> None:
        """Called once a pattern has finished playing."""

    @classmethod
    @abstractmethod
    def from_env(cls) -> Optional["OutputBackend"]:
        """Create backend from environment variables.

        Returns None if the backend cannot be used in this environment.
        """
        ...
