"""
Unit tests for BuzzDaemon.

Tests the daemon's core functionality:
- Scheduled buzzes fired from the once-per-second tick
- Manual "feel now" requests sharing the executor with the schedule
- Settings snapshot replacement
- Scheduler loop error handling and graceful shutdown
"""

import asyncio
import io
import signal
import sys
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from vibetime.output.base import OutputBackend
from vibetime.output.console import ConsoleBackend
from vibetime.output.log import LogBackend
from vibetime.pattern.enums import FeelOutcome, PulseKind
from vibetime.pattern.executor import SequenceExecutor
from vibetime.pattern.models import TimingProfile, VibeConfig
from vibetime.schedule.calculator import ScheduleState
from vibetime.schedule.daemon import BuzzDaemon

# ============================================================================
# Fixtures
# ============================================================================


class FakeClock:
    """Settable wall clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def mock_config():
    """Mock VibeTimeConfig."""
    config = MagicMock()
    config.vibe_config = VibeConfig(buzz_interval=15, start_minute=0)
    config.timing = TimingProfile()
    config.schedule_enabled = True
    config.output_backend = None
    config.api_port = 8766
    config.api_token = "test_token_123"
    return config


@pytest.fixture
def mock_backend():
    """Mock output backend."""
    return MagicMock(spec=OutputBackend)


@pytest.fixture
def clock():
    """Clock parked on a buzz instant (14:30:00)."""
    return FakeClock(datetime(2026, 1, 20, 14, 30, 0))


@pytest.fixture
def executor():
    """Executor that yields to the loop instead of really sleeping."""

    async def instant_sleep(seconds: float) -> None:
        await asyncio.sleep(0)

    return SequenceExecutor(sleep=instant_sleep)


@pytest.fixture
def daemon(mock_config, mock_backend, clock, executor):
    """Create daemon with mocked dependencies."""
    return BuzzDaemon(mock_config, backend=mock_backend, clock=clock, executor=executor)


# ============================================================================
# Scheduled Buzz Tests
# ============================================================================


@pytest.mark.asyncio
async def test_tick_fires_on_buzz_instant(daemon, mock_backend):
    """Test a tick at 14:30:00 plays 14:30 (2L+4S, separator, 6L)."""
    daemon._tick()

    assert daemon.playback_task is not None
    await daemon.playback_task

    kinds = [c.args[0] for c in mock_backend.trigger_haptic_pulse.call_args_list]
    assert kinds == [PulseKind.LONG] * 2 + [PulseKind.SHORT] * 4 + [PulseKind.LONG] * 6
    mock_backend.complete.assert_called_once()
    mock_backend.play_tone.assert_not_called()


@pytest.mark.asyncio
async def test_tick_ignores_non_buzz_minute(daemon, clock):
    """Test minutes off the schedule never fire."""
    clock.now = datetime(2026, 1, 20, 14, 31, 0)

    daemon._tick()

    assert daemon.playback_task is None


@pytest.mark.asyncio
async def test_tick_ignores_later_seconds(daemon, clock):
    """Test a buzz minute only fires at second 0."""
    clock.now = datetime(2026, 1, 20, 14, 30, 1)

    daemon._tick()

    assert daemon.playback_task is None


@pytest.mark.asyncio
async def test_tick_fires_once_per_minute(daemon, mock_backend, clock):
    """Test two ticks within second 0 only buzz once."""
    daemon._tick()
    await daemon.playback_task
    pulses_after_first = mock_backend.trigger_haptic_pulse.call_count

    clock.now = datetime(2026, 1, 20, 14, 30, 0, 900_000)
    daemon._tick()
    await asyncio.sleep(0)

    assert mock_backend.trigger_haptic_pulse.call_count == pulses_after_first


@pytest.mark.asyncio
async def test_tick_disabled_schedule(daemon, mock_config):
    """Test no scheduled buzz when the schedule is disabled."""
    mock_config.schedule_enabled = False

    daemon._tick()

    assert daemon.playback_task is None


@pytest.mark.asyncio
async def test_tick_empty_pattern_is_skipped(daemon, clock, mock_backend):
    """Test a buzz at 00:00 in 24-hour mode plays nothing."""
    clock.now = datetime(2026, 1, 20, 0, 0, 0)

    daemon._tick()

    assert daemon.playback_task is None
    mock_backend.trigger_haptic_pulse.assert_not_called()
    assert daemon._last_buzz == (0, 0)


# ============================================================================
# Manual Feel Tests
# ============================================================================


@pytest.mark.asyncio
async def test_feel_defaults_to_current_time(daemon, mock_backend, clock):
    """Test feel() without arguments plays the clock's time."""
    clock.now = datetime(2026, 1, 20, 8, 5, 42)

    outcome = daemon.feel()
    await daemon.playback_task

    assert outcome == FeelOutcome.ACCEPTED
    kinds = [c.args[0] for c in mock_backend.trigger_haptic_pulse.call_args_list]
    L, S = PulseKind.LONG, PulseKind.SHORT
    assert kinds == [L, S, S, S, L]


@pytest.mark.asyncio
async def test_feel_specific_time(daemon, mock_backend):
    """Test feel() plays the requested time."""
    outcome = daemon.feel(23, 59)
    await daemon.playback_task

    assert outcome == FeelOutcome.ACCEPTED
    assert mock_backend.trigger_haptic_pulse.call_count == 7 + 15


@pytest.mark.asyncio
async def test_feel_empty(daemon, mock_backend):
    """Test feel() reports EMPTY when nothing would be felt."""
    outcome = daemon.feel(0, 0)

    assert outcome == FeelOutcome.EMPTY
    mock_backend.trigger_haptic_pulse.assert_not_called()


@pytest.mark.asyncio
async def test_feel_dropped_while_scheduled_buzz_plays(daemon, mock_backend):
    """Test a manual request racing a scheduled buzz is dropped."""
    daemon._tick()
    scheduled_task = daemon.playback_task

    outcome = daemon.feel(23, 59)
    await scheduled_task

    assert outcome == FeelOutcome.DROPPED
    assert daemon.playback_task is scheduled_task
    # Only 14:30 was played
    assert mock_backend.trigger_haptic_pulse.call_count == 12
    mock_backend.complete.assert_called_once()


@pytest.mark.asyncio
async def test_scheduled_buzz_dropped_while_manual_plays(daemon, mock_backend):
    """Test a scheduled buzz racing a manual request is dropped."""
    daemon.feel(1, 1)
    manual_task = daemon.playback_task

    daemon._tick()
    await manual_task

    assert daemon.playback_task is manual_task
    assert mock_backend.trigger_haptic_pulse.call_count == 2


# ============================================================================
# Settings Tests
# ============================================================================


@pytest.mark.asyncio
async def test_update_settings_applies_to_next_pattern(daemon, mock_backend):
    """Test a new snapshot is used for the next request."""
    daemon.update_settings(VibeConfig(tally_base=10, audio_enabled=True))

    daemon.feel(14, 37)
    await daemon.playback_task

    # 1L+4S | 3L+7S
    assert mock_backend.trigger_haptic_pulse.call_count == 15
    assert mock_backend.play_tone.call_count == 15


@pytest.mark.asyncio
async def test_update_settings_changes_schedule(daemon, clock):
    """Test the tick follows the new interval and offset."""
    daemon.update_settings(VibeConfig(buzz_interval=10, start_minute=5))

    daemon._tick()  # 14:30 is no longer a buzz minute
    assert daemon.playback_task is None

    clock.now = datetime(2026, 1, 20, 14, 35, 0)
    daemon._tick()
    assert daemon.playback_task is not None
    await daemon.playback_task


def test_current_schedule(daemon, clock):
    """Test the countdown is computed from the clock and current settings."""
    clock.now = datetime(2026, 1, 20, 14, 3, 20)
    daemon.update_settings(VibeConfig(buzz_interval=5))

    assert daemon.current_schedule() == ScheduleState(5, 1, 40)


def test_seconds_until_next_tick(daemon, clock):
    """Test ticks align to the next whole second."""
    clock.now = datetime(2026, 1, 20, 14, 3, 20, 250_000)

    assert daemon._seconds_until_next_tick() == pytest.approx(0.75)


class TerminalStream(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_backend_defaults_to_log_when_unconfigured(mock_config, clock, monkeypatch):
    """Test an unconfigured daemon logs pulses even when attached to a terminal."""
    monkeypatch.delenv("VIBETIME_OUTPUT", raising=False)
    monkeypatch.setattr(sys, "stdout", TerminalStream())
    mock_config.output_backend = None

    daemon = BuzzDaemon(mock_config, clock=clock)

    assert isinstance(daemon.backend, LogBackend)


def test_backend_unknown_name_falls_back_to_log(mock_config, clock):
    """Test an unknown configured backend falls back to logging output."""
    mock_config.output_backend = "does-not-exist"

    daemon = BuzzDaemon(mock_config, clock=clock)

    assert isinstance(daemon.backend, LogBackend)


def test_backend_configured_console(mock_config, clock, monkeypatch):
    """Test VIBETIME_OUTPUT=console is honored on a terminal."""
    monkeypatch.setattr(sys, "stdout", TerminalStream())
    mock_config.output_backend = "console"

    daemon = BuzzDaemon(mock_config, clock=clock)

    assert isinstance(daemon.backend, ConsoleBackend)


def test_backend_console_without_terminal_falls_back_to_log(mock_config, clock, monkeypatch):
    """Test a console backend requested under a service manager logs instead."""
    monkeypatch.setattr(sys, "stdout", io.StringIO())
    mock_config.output_backend = "console"

    daemon = BuzzDaemon(mock_config, clock=clock)

    assert isinstance(daemon.backend, LogBackend)


# ============================================================================
# Scheduler Loop Tests
# ============================================================================


@pytest.mark.asyncio
async def test_scheduler_loop_backs_off_on_error(daemon):
    """Test tick errors are logged and backed off from instead of crashing."""
    daemon.running = True
    daemon._tick = MagicMock(side_effect=RuntimeError("clock exploded"))

    async def stop_after_backoff(seconds):
        daemon.running = False

    sleep = AsyncMock(side_effect=stop_after_backoff)
    with patch("vibetime.schedule.daemon.asyncio.sleep", sleep):
        await daemon._scheduler_loop()

    daemon._tick.assert_called_once()
    sleep.assert_called_once_with(5)


@pytest.mark.asyncio
async def test_scheduler_loop_ticks_until_stopped(daemon, clock):
    """Test the loop ticks and sleeps to the next second while running."""
    clock.now = datetime(2026, 1, 20, 14, 31, 0, 500_000)
    daemon.running = True
    daemon._tick = MagicMock()
    sleeps = []

    async def record_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 3:
            daemon.running = False

    with patch("vibetime.schedule.daemon.asyncio.sleep", AsyncMock(side_effect=record_sleep)):
        await daemon._scheduler_loop()

    assert daemon._tick.call_count == 3
    assert sleeps == [pytest.approx(0.5)] * 3


# ============================================================================
# Shutdown Tests
# ============================================================================


@pytest.mark.asyncio
async def test_handle_shutdown_cancels_tasks(daemon):
    """Test shutdown cancels the scheduler and API tasks and signals completion."""
    daemon.running = True
    daemon.scheduler_task = asyncio.create_task(asyncio.sleep(100))
    daemon.api_task = asyncio.create_task(asyncio.sleep(100))

    await daemon._handle_shutdown(signal.SIGTERM)

    assert daemon.running is False
    assert daemon.scheduler_task.cancelled()
    assert daemon.api_task.cancelled()
    assert daemon.shutdown_event.is_set()


@pytest.mark.asyncio
async def test_handle_shutdown_waits_for_pattern(daemon, mock_backend):
    """Test shutdown lets an in-flight pattern finish."""
    daemon.feel(14, 37)

    await daemon._handle_shutdown(signal.SIGINT)

    assert daemon.playback_task.done()
    mock_backend.complete.assert_called_once()
    assert daemon.shutdown_event.is_set()
