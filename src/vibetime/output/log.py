"""Logging output backend: records every pulse and tone on the output logger."""

import logging
from typing import Optional

from vibetime.output.base import TONE_FREQUENCIES_HZ, OutputBackend
from vibetime.pattern.enums import PulseKind

logger = logging.getLogger("vibetime.output")


class LogBackend(OutputBackend):
    """Output backend for headless hosts and debugging."""

    def trigger_haptic_pulse(self, kind: PulseKind, duration_ms: int) -> None:
        logger.info(f"Haptic pulse: {kind} ({duration_ms}ms)")

    def play_tone(self, kind: PulseKind, duration_ms: int) -> None:
        logger.info(f"Tone: {TONE_FREQUENCIES_HZ[kind]}Hz ({duration_ms}ms)")

    def complete(self) -> None:
        logger.info("Pattern complete")

    @classmethod
    def from_env(cls) -> Optional["LogBackend"]:
        return cls()
