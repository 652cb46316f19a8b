"""
Sequence Executor - Plays a pulse pattern in real time.

The executor walks a pattern event by event, firing output callbacks for
pulses and suspending for every event's duration. Only one pattern plays at
a time: a request that arrives while a pattern is running is dropped, not
queued, so an in-flight pattern is never interrupted halfway.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .encoder import pattern_duration_ms
from .enums import PulseKind
from .models import Pattern, PulseEvent

OutputCallback = Callable[[PulseKind, int], None]
CompletionCallback = Callable[[], None]
SleepFunction = Callable[[float], Awaitable[None]]


class SequenceExecutor:
    """
    Drives patterns forward on the event loop.

    State machine: IDLE -> RUNNING -> IDLE. The busy flag is checked and
    set without yielding to the loop, so two concurrent callers (scheduled
    buzz and a manual "feel now") cannot both start.

    Output callbacks are fire-and-forget. An exception raised by one is
    logged and the timeline keeps going.
    """

    def __init__(self, sleep: Optional[SleepFunction] = None):
        """
        Initialize the executor.

        Args:
            sleep: Coroutine used to suspend for a number of seconds
                   (default: asyncio.sleep)
        """
        self._sleep = sleep or asyncio.sleep
        self._owner: Optional[object] = None
        self.logger = logging.getLogger("vibetime.executor")

    @property
    def is_busy(self) -> bool:
        """Whether a pattern is currently playing."""
        return self._owner is not None

    async def execute(
        self,
        pattern: Pattern,
        on_pulse: OutputCallback,
        audio_enabled: bool = False,
        on_tone: Optional[OutputCallback] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> bool:
        """
        Play a pattern to completion.

        Args:
            pattern: Events to play, in order
            on_pulse: Called with (kind, duration_ms) at the start of each pulse
            audio_enabled: Whether on_tone accompanies each pulse
            on_tone: Called with (kind, duration_ms) alongside on_pulse
            on_complete: Called once the whole pattern has elapsed

        Returns:
            True if the pattern was played, False if it was dropped because
            another pattern was already running
        """
        if self.is_busy:
            self.logger.debug("Executor busy, dropping pattern request")
            return False

        if not pattern:
            self._notify(on_complete)
            return True

        token = self._claim()
        await self._play(pattern, on_pulse, audio_enabled, on_tone, on_complete, token)
        return True

    def start(
        self,
        pattern: Pattern,
        on_pulse: OutputCallback,
        audio_enabled: bool = False,
        on_tone: Optional[OutputCallback] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> Optional[asyncio.Task]:
        """
        Start playing a pattern in the background.

        The timeline is claimed before this returns, so a second start() or
        execute() issued right after is dropped. Must be called from within
        a running event loop.

        Returns:
            The playback task, or None if a pattern is already running
        """
        if self.is_busy:
            self.logger.debug("Executor busy, dropping pattern request")
            return None

        if not pattern:
            return asyncio.create_task(
                self.execute(pattern, on_pulse, audio_enabled, on_tone, on_complete),
                name="vibetime-pattern",
            )

        token = self._claim()
        task = asyncio.create_task(
            self._play(pattern, on_pulse, audio_enabled, on_tone, on_complete, token),
            name="vibetime-pattern",
        )
        # A task cancelled before its first step never reaches _play's finally
        task.add_done_callback(lambda _: self._release(token))
        return task

    async def _play(
        self,
        pattern: Pattern,
        on_pulse: OutputCallback,
        audio_enabled: bool,
        on_tone: Optional[OutputCallback],
        on_complete: Optional[CompletionCallback],
        token: object,
    ) -> None:
        self.logger.debug(
            f"Playing pattern: {len(pattern)} events, {pattern_duration_ms(pattern)}ms"
        )

        try:
            for event in pattern:
                if isinstance(event, PulseEvent):
                    self._fire(on_pulse, event.kind, event.duration_ms)
                    if audio_enabled and on_tone is not None:
                        self._fire(on_tone, event.kind, event.duration_ms)
                await self._sleep(event.duration_ms / 1000)
        finally:
            self._release(token)

        self._notify(on_complete)

    def _claim(self) -> object:
        token = object()
        self._owner = token
        return token

    def _release(self, token: object) -> None:
        if self._owner is token:
            self._owner = None

    def _fire(self, callback: OutputCallback, kind: PulseKind, duration_ms: int) -> None:
        try:
            callback(kind, duration_ms)
        except Exception as e:
            self.logger.warning(f"Output callback failed for {kind} pulse: {e}")

    def _notify(self, on_complete: Optional[CompletionCallback]) -> None:
        if on_complete is None:
            return
        try:
            on_complete()
        except Exception as e:
            self.logger.warning(f"Completion callback failed: {e}")
