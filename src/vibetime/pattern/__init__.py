"""
Pulse Pattern System

Tally encoding, pattern building and real-time sequence execution.
"""

from .encoder import build_pattern, describe_pattern, encode
from .enums import FeelOutcome, GapKind, PulseKind
from .executor import SequenceExecutor
from .models import GapEvent, Pattern, PulseEvent, TimingProfile, VibeConfig

__all__ = [
    "FeelOutcome",
    "GapEvent",
    "GapKind",
    "Pattern",
    "PulseEvent",
    "PulseKind",
    "SequenceExecutor",
    "TimingProfile",
    "VibeConfig",
    "build_pattern",
    "describe_pattern",
    "encode",
]
