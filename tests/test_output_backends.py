"""
Unit tests for output backends.

Tests the console and logging backends and the backend registry.
"""

import io
import logging
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from vibetime.output import get_backend
from vibetime.output.console import ConsoleBackend
from vibetime.output.log import LogBackend
from vibetime.pattern.enums import PulseKind


class TestConsoleBackend:
    """Tests for ConsoleBackend."""

    def test_pulse_glyphs(self):
        """Test LONG and SHORT pulses render as distinct glyphs."""
        stream = io.StringIO()
        backend = ConsoleBackend(stream)

        backend.trigger_haptic_pulse(PulseKind.LONG, 250)
        backend.trigger_haptic_pulse(PulseKind.SHORT, 100)
        backend.complete()

        assert stream.getvalue() == "▬•\n"

    def test_tones_show_frequency(self):
        """Test tones render with their frequency, an octave apart."""
        stream = io.StringIO()
        backend = ConsoleBackend(stream)

        backend.play_tone(PulseKind.LONG, 250)
        backend.play_tone(PulseKind.SHORT, 100)

        assert stream.getvalue() == "♪440♪880"

    def test_stream_failure_never_raises(self):
        """Test a broken stream is logged, not raised."""
        stream = MagicMock()
        stream.write.side_effect = OSError("broken pipe")
        backend = ConsoleBackend(stream)

        backend.trigger_haptic_pulse(PulseKind.LONG, 250)
        backend.complete()

    def test_closed_stream_never_raises(self):
        """Test writing to a closed stream is swallowed."""
        stream = io.StringIO()
        stream.close()

        ConsoleBackend(stream).trigger_haptic_pulse(PulseKind.SHORT, 100)


class TestLogBackend:
    """Tests for LogBackend."""

    def test_logs_pulses_and_tones(self, caplog):
        """Test each output is logged on vibetime.output."""
        backend = LogBackend()

        with caplog.at_level(logging.INFO, logger="vibetime.output"):
            backend.trigger_haptic_pulse(PulseKind.LONG, 250)
            backend.play_tone(PulseKind.SHORT, 100)
            backend.complete()

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "Haptic pulse: long (250ms)",
            "Tone: 880Hz (100ms)",
            "Pattern complete",
        ]


class TerminalStream(io.StringIO):
    """In-memory stream that reports itself as an interactive terminal."""

    def isatty(self) -> bool:
        return True


@pytest.fixture
def terminal(monkeypatch):
    """Make stdout look like an interactive terminal."""
    # pytest's output capture re-installs its own sys.stdout before the test
    # body runs, so patch the console module's view of sys instead.
    monkeypatch.setattr(
        "vibetime.output.console.sys", SimpleNamespace(stdout=TerminalStream())
    )


@pytest.fixture
def piped(monkeypatch):
    """Make stdout look like a pipe or a log file."""
    monkeypatch.setattr(sys, "stdout", io.StringIO())


class TestGetBackend:
    """Tests for get_backend() registry."""

    def test_by_name(self, terminal):
        """Test explicit backend names."""
        assert isinstance(get_backend("console"), ConsoleBackend)
        assert isinstance(get_backend("log"), LogBackend)

    def test_console_needs_terminal(self, piped):
        """Test the console backend is unavailable when stdout is not a terminal."""
        assert ConsoleBackend.from_env() is None
        assert get_backend("console") is None

    def test_unknown_name(self):
        """Test an unknown name returns None."""
        assert get_backend("braille-display") is None

    def test_from_env(self, monkeypatch):
        """Test VIBETIME_OUTPUT selects the backend."""
        monkeypatch.setenv("VIBETIME_OUTPUT", "log")

        assert isinstance(get_backend(), LogBackend)

    def test_auto_detect_terminal(self, monkeypatch, terminal):
        """Test auto-detection picks the console on an interactive terminal."""
        monkeypatch.delenv("VIBETIME_OUTPUT", raising=False)

        assert isinstance(get_backend(), ConsoleBackend)

    def test_auto_detect_headless(self, monkeypatch, piped):
        """Test auto-detection falls through to logging without a terminal."""
        monkeypatch.delenv("VIBETIME_OUTPUT", raising=False)

        assert isinstance(get_backend(), LogBackend)
