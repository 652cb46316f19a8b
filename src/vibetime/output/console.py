"""Console output backend: renders pulses as glyphs on a text stream."""

import logging
import sys
from typing import Optional, TextIO

from vibetime.output.base import TONE_FREQUENCIES_HZ, OutputBackend
from vibetime.pattern.enums import PulseKind

logger = logging.getLogger("vibetime.output")

GLYPHS = {
    PulseKind.LONG: "▬",  # black rectangle
    PulseKind.SHORT: "•",  # bullet
}
TONE_GLYPH = "♪"  # eighth note


class ConsoleBackend(OutputBackend):
    """Writes one glyph per pulse, ending the line when the pattern completes."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def trigger_haptic_pulse(self, kind: PulseKind, duration_ms: int) -> None:
        self._write(GLYPHS[kind])

    def play_tone(self, kind: PulseKind, duration_ms: int) -> None:
        self._write(f"{TONE_GLYPH}{TONE_FREQUENCIES_HZ[kind]}")

    def complete(self) -> None:
        self._write("\n")

    def _write(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Console output failed: {e}")

    @classmethod
    def from_env(cls) -> Optional["ConsoleBackend"]:
        """Usable only when stdout is an interactive terminal."""
        try:
            interactive = sys.stdout.isatty()
        except (AttributeError, ValueError):
            interactive = False
        return cls() if interactive else None
