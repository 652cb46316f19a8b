"""
Buzz Daemon - Main orchestrator for scheduled and manual time buzzes.

This daemon runs continuously in the background, managing:
1. Schedule ticker (samples the clock once per second)
2. Manual "feel now" requests from the HTTP API
3. Graceful shutdown handling

Both trigger sources funnel into one SequenceExecutor, so a scheduled buzz
and a manual request racing each other never overlap: whichever starts
first plays, the other is dropped.

Usage:
    # Development
    python -m vibetime.schedule

    # Production (via systemd)
    systemctl start vibetime-daemon
"""

import asyncio
import logging
import signal
from datetime import datetime
from typing import Callable, Optional

from vibetime.output import get_backend
from vibetime.output.base import OutputBackend
from vibetime.output.log import LogBackend
from vibetime.pattern.encoder import build_pattern, describe_pattern, vibration_status
from vibetime.pattern.enums import FeelOutcome
from vibetime.pattern.executor import SequenceExecutor
from vibetime.pattern.models import VibeConfig
from vibetime.schedule.calculator import ScheduleState, schedule_state, should_fire_now
from vibetime.utils.config import VibeTimeConfig


class BuzzDaemon:
    """
    Main daemon process that buzzes the time on a recurring schedule.

    The daemon ticks once per second, fires the buzz pattern when the
    schedule says so, and serves the HTTP API for manual requests and
    settings changes.
    """

    def __init__(
        self,
        config: VibeTimeConfig,
        backend: Optional[OutputBackend] = None,
        clock: Optional[Callable[[], datetime]] = None,
        executor: Optional[SequenceExecutor] = None,
    ):
        """
        Initialize the daemon.

        Args:
            config: VibeTimeConfig instance with encoding, schedule and API settings
            backend: Output capabilities (default: the VIBETIME_OUTPUT backend,
                     or log when that is unset or unknown)
            clock: Local wall-clock time source (default: datetime.now)
            executor: Shared sequence executor (default: a new one)
        """
        self.config = config
        self.logger = logging.getLogger("vibetime.daemon")
        self.vibe_config: VibeConfig = config.vibe_config
        self.timing = config.timing
        self.backend = backend or self._configured_backend()
        self.clock = clock or datetime.now
        self.executor = executor or SequenceExecutor()

        # State
        self.running = False
        self.scheduler_task: Optional[asyncio.Task] = None
        self.api_task: Optional[asyncio.Task] = None
        self.playback_task: Optional[asyncio.Task] = None
        self.shutdown_event = asyncio.Event()
        self._last_buzz: Optional[tuple[int, int]] = None

    def _configured_backend(self) -> OutputBackend:
        """
        Resolve the output backend for a background daemon.

        No terminal auto-detection here: an unconfigured daemon logs its pulses.
        """
        if self.config.output_backend:
            backend = get_backend(self.config.output_backend)
            if backend is not None:
                return backend
            self.logger.warning(
                f"Output backend '{self.config.output_backend}' unavailable, using log"
            )
        return LogBackend()

    def update_settings(self, vibe_config: VibeConfig) -> None:
        """
        Replace the encoding/schedule snapshot.

        A pattern already playing keeps the snapshot it was built from.
        """
        self.vibe_config = vibe_config
        self.logger.info(
            f"Settings updated: base={vibe_config.tally_base}, "
            f"interval={vibe_config.buzz_interval}, start={vibe_config.start_minute}"
        )

    def current_schedule(self) -> ScheduleState:
        """Next buzz minute and countdown as of now."""
        now = self.clock()
        config = self.vibe_config
        return schedule_state(now.minute, now.second, config.start_minute, config.buzz_interval)

    def feel(self, hour: Optional[int] = None, minute: Optional[int] = None) -> FeelOutcome:
        """
        Play a time on demand.

        Args:
            hour: Hour to play (default: current hour)
            minute: Minute to play (default: current minute)

        Returns:
            ACCEPTED, DROPPED (already playing) or EMPTY (nothing to feel)
        """
        if hour is None or minute is None:
            now = self.clock()
            hour = now.hour if hour is None else hour
            minute = now.minute if minute is None else minute

        return self._play(hour, minute, source="manual")

    def _play(self, hour: int, minute: int, source: str) -> FeelOutcome:
        """Build the pattern against the current snapshot and start it."""
        config = self.vibe_config
        pattern = build_pattern(hour, minute, config, self.timing)

        if not pattern:
            status = vibration_status(hour, minute, config)
            self.logger.info(f"{source.capitalize()} buzz {hour:02d}:{minute:02d}: {status}")
            return FeelOutcome.EMPTY

        task = self.executor.start(
            pattern,
            on_pulse=self.backend.trigger_haptic_pulse,
            audio_enabled=config.audio_enabled,
            on_tone=self.backend.play_tone,
            on_complete=self.backend.complete,
        )

        if task is None:
            self.logger.info(
                f"{source.capitalize()} buzz {hour:02d}:{minute:02d} dropped, pattern in progress"
            )
            return FeelOutcome.DROPPED

        self.playback_task = task
        self.logger.info(
            f"{source.capitalize()} buzz {hour:02d}:{minute:02d} "
            f"({describe_pattern(hour, minute, config)})"
        )
        return FeelOutcome.ACCEPTED

    def _tick(self) -> None:
        """Fire the scheduled buzz if this second is a buzz instant."""
        if not self.config.schedule_enabled:
            return

        now = self.clock()
        config = self.vibe_config

        if not should_fire_now(now.minute, now.second, config.start_minute, config.buzz_interval):
            return

        # A tick landing early in the second can sample second 0 twice
        if self._last_buzz == (now.hour, now.minute):
            return

        self._last_buzz = (now.hour, now.minute)
        self._play(now.hour, now.minute, source="scheduled")

    def _seconds_until_next_tick(self) -> float:
        """Sleep time that lands the next tick just after a whole second."""
        now = self.clock()
        return 1.0 - now.microsecond / 1_000_000

    async def _scheduler_loop(self) -> None:
        """
        Main scheduler loop: sample the clock every second and fire buzzes.

        Errors are logged and backed off from rather than crashing the daemon.
        """
        self.logger.info("Scheduler loop started")

        if self.config.schedule_enabled:
            state = self.current_schedule()
            self.logger.info(
                f"Next buzz at :{state.next_buzz_minute % 60:02d} "
                f"(in {state.minutes_left}m {state.seconds_left}s)"
            )

        while self.running:
            try:
                self._tick()
                await asyncio.sleep(self._seconds_until_next_tick())

            except asyncio.CancelledError:
                self.logger.info("Scheduler loop cancelled, shutting down")
                break
            except Exception as e:
                self.logger.error(f"Scheduler loop error: {e}", exc_info=True)
                await asyncio.sleep(5)  # Back off 5 seconds on error

        self.logger.info("Scheduler loop stopped")

    async def _run_api_server(self) -> None:
        """
        Run the FastAPI server using uvicorn.

        The API server runs concurrently with the scheduler loop, so manual
        requests and scheduled buzzes share the same executor.
        """
        import uvicorn

        from vibetime.api.server import create_app

        self.logger.info(f"Starting API server on http://127.0.0.1:{self.config.api_port}")

        app = create_app(self, self.config)

        config = uvicorn.Config(
            app,
            host="127.0.0.1",
            port=self.config.api_port,
            log_level="info",
            access_log=False,  # Reduce noise, we have our own logging
        )
        server = uvicorn.Server(config)

        try:
            await server.serve()
        except asyncio.CancelledError:
            self.logger.info("API server cancelled, shutting down")
        except Exception as e:
            self.logger.error(f"API server error: {e}", exc_info=True)

        self.logger.info("API server stopped")

    def _register_signal_handlers(self) -> None:
        """Register SIGTERM and SIGINT handlers for graceful shutdown."""
        loop = asyncio.get_event_loop()

        def create_shutdown_task(s: signal.Signals) -> asyncio.Task[None]:
            return asyncio.create_task(self._handle_shutdown(s))

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                create_shutdown_task,
                sig,
            )

        self.logger.info("Signal handlers registered (SIGTERM, SIGINT)")

    async def _handle_shutdown(self, sig: signal.Signals) -> None:
        """
        Handle graceful shutdown.

        Shutdown process:
        1. Stop ticking (running=False)
        2. Cancel scheduler task and API task
        3. Let an in-flight pattern finish (patterns last a few seconds at most)

        Args:
            sig: The signal that triggered shutdown
        """
        self.logger.info(f"Received {sig.name}, shutting down gracefully...")

        self.running = False

        for task in (self.scheduler_task, self.api_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if self.playback_task and not self.playback_task.done():
            self.logger.info("Waiting for in-flight pattern to finish...")
            try:
                await asyncio.wait_for(self.playback_task, timeout=10.0)
            except asyncio.TimeoutError:
                self.logger.warning("Pattern still playing after 10s, giving up")

        self.shutdown_event.set()
        self.logger.info("Shutdown complete")

    async def start(self) -> None:
        """
        Start the daemon (blocks until shutdown).

        Registers signal handlers, then runs the scheduler loop and the API
        server concurrently until a shutdown signal arrives.
        """
        self.logger.info("Starting Buzz Daemon...")
        self.running = True

        config = self.vibe_config
        if self.config.schedule_enabled:
            self.logger.info(
                f"Buzz every {config.buzz_interval} min from :{config.start_minute:02d}"
            )
        else:
            self.logger.info("Scheduled buzzes disabled, manual requests only")

        self._register_signal_handlers()

        self.scheduler_task = asyncio.create_task(self._scheduler_loop())
        self.api_task = asyncio.create_task(self._run_api_server())

        await self.shutdown_event.wait()

        self.logger.info("Buzz Daemon stopped")
