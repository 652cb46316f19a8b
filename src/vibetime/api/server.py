"""
HTTP API Server - REST endpoints for the VibeTime shell.

This API is the thin surface the clock UI and settings screen talk to:
preview a pattern, ask to feel a time now, read the buzz countdown and
replace the settings snapshot.

Endpoints:
    GET  /api/pattern   - Pattern, description and waveform for a time
    POST /api/feel      - Play a time now (current time by default)
    GET  /api/schedule  - Next buzz minute and countdown
    GET  /api/settings  - Current settings snapshot
    PUT  /api/settings  - Replace settings snapshot (in memory only)
    GET  /api/health    - Health check
    GET  /api/status    - Daemon status
"""

from typing import TYPE_CHECKING, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from pydantic import BaseModel, Field

from vibetime.pattern.encoder import (
    build_pattern,
    describe_pattern,
    pattern_duration_ms,
    to_waveform,
    vibration_status,
)
from vibetime.pattern.enums import FeelOutcome
from vibetime.pattern.models import PatternEvent, VibeConfig
from vibetime.utils.config import VibeTimeConfig

if TYPE_CHECKING:
    from vibetime.schedule.daemon import BuzzDaemon

# ========================================================================
# Request/Response Models
# ========================================================================


class WaveformResponse(BaseModel):
    """Platform waveform arrays (leading 0ms delay, amplitude 0 for gaps)."""

    timings: List[int]
    amplitudes: List[int]


class PatternResponse(BaseModel):
    """Pattern preview for a time."""

    hour: int
    minute: int
    description: str
    status: Optional[str] = Field(
        default=None,
        description="Why nothing would be felt, if the pattern is empty",
    )
    duration_ms: int
    pulse_count: int
    events: List[PatternEvent]
    waveform: WaveformResponse


class FeelRequest(BaseModel):
    """Request body for playing a time. Omitted fields use the current time."""

    hour: Optional[int] = Field(default=None, ge=0, le=23)
    minute: Optional[int] = Field(default=None, ge=0, le=59)


class FeelResponse(BaseModel):
    """Response after a feel request."""

    outcome: FeelOutcome
    hour: int
    minute: int
    message: str


class ScheduleResponse(BaseModel):
    """Buzz schedule countdown."""

    enabled: bool
    buzz_interval: int
    start_minute: int
    next_buzz_minute: int = Field(
        ...,
        description="Minute of the next buzz; 60-119 means the following hour",
    )
    minutes_left: int
    seconds_left: int


# ========================================================================
# Authentication
# ========================================================================


def create_bearer_token_dependency(config: VibeTimeConfig):
    """
    Create a dependency for bearer token authentication.

    Args:
        config: VibeTimeConfig instance with API token

    Returns:
        FastAPI dependency function for token verification
    """

    async def verify_bearer_token(authorization: str = Header(None)) -> bool:
        """
        Verify API token from Authorization header.

        Raises:
            HTTPException: 401 if missing/malformed header, 403 if invalid token
        """
        api_token = config.api_token

        if not api_token:
            raise HTTPException(
                status_code=500,
                detail="API token not configured. Set VIBETIME_API_TOKEN environment variable.",
            )

        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(
                status_code=401,
                detail="Missing or invalid Authorization header. Expected: 'Bearer <token>'",
            )

        token = authorization[7:]  # Remove "Bearer " prefix

        if token != api_token:
            raise HTTPException(status_code=403, detail="Invalid API token")

        return True

    return verify_bearer_token


# ========================================================================
# App Factory
# ========================================================================

_FEEL_MESSAGES = {
    FeelOutcome.ACCEPTED: "Vibrating...",
    FeelOutcome.DROPPED: "Already vibrating, request dropped",
}


def create_app(daemon: "BuzzDaemon", config: VibeTimeConfig) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        daemon: BuzzDaemon owning the executor and settings snapshot
        config: VibeTimeConfig instance with configuration

    Returns:
        FastAPI app instance
    """
    app = FastAPI(
        title="VibeTime API",
        description="HTTP API for previewing and feeling tally-encoded time",
        version="0.1.0",
    )

    verify_token = create_bearer_token_dependency(config)

    # ========================================================================
    # Endpoints
    # ========================================================================

    @app.get("/api/pattern", response_model=PatternResponse)
    async def get_pattern(
        hour: int = Query(..., ge=0, le=23),
        minute: int = Query(..., ge=0, le=59),
        authorized: bool = Depends(verify_token),
    ):
        """
        Preview the pattern for a time under the current settings.

        Example:
            curl "http://localhost:8766/api/pattern?hour=14&minute=37" \\
                 -H "Authorization: Bearer your_token_here"
        """
        settings = daemon.vibe_config
        pattern = build_pattern(hour, minute, settings, daemon.timing)
        timings, amplitudes = to_waveform(pattern)

        return PatternResponse(
            hour=hour,
            minute=minute,
            description=describe_pattern(hour, minute, settings),
            status=vibration_status(hour, minute, settings),
            duration_ms=pattern_duration_ms(pattern),
            pulse_count=sum(1 for event in pattern if event.type == "pulse"),
            events=list(pattern),
            waveform=WaveformResponse(timings=timings, amplitudes=amplitudes),
        )

    @app.post("/api/feel", response_model=FeelResponse)
    async def feel_time(request: FeelRequest, authorized: bool = Depends(verify_token)):
        """
        Play a time now. Dropped (not queued) if a pattern is already playing.

        Example:
            curl -X POST http://localhost:8766/api/feel \\
                 -H "Authorization: Bearer your_token_here" \\
                 -H "Content-Type: application/json" \\
                 -d '{"hour": 14, "minute": 37}'
        """
        now = daemon.clock()
        hour = now.hour if request.hour is None else request.hour
        minute = now.minute if request.minute is None else request.minute

        outcome = daemon.feel(hour, minute)

        if outcome == FeelOutcome.EMPTY:
            message = vibration_status(hour, minute, daemon.vibe_config) or "Nothing to feel"
        else:
            message = _FEEL_MESSAGES[outcome]

        return FeelResponse(outcome=outcome, hour=hour, minute=minute, message=message)

    @app.get("/api/schedule", response_model=ScheduleResponse)
    async def get_schedule(authorized: bool = Depends(verify_token)):
        """Next buzz and countdown as of now."""
        state = daemon.current_schedule()
        settings = daemon.vibe_config

        return ScheduleResponse(
            enabled=config.schedule_enabled,
            buzz_interval=settings.buzz_interval,
            start_minute=settings.start_minute,
            next_buzz_minute=state.next_buzz_minute,
            minutes_left=state.minutes_left,
            seconds_left=state.seconds_left,
        )

    @app.get("/api/settings", response_model=VibeConfig)
    async def get_settings(authorized: bool = Depends(verify_token)):
        """Current settings snapshot."""
        return daemon.vibe_config

    @app.put("/api/settings", response_model=VibeConfig)
    async def put_settings(settings: VibeConfig, authorized: bool = Depends(verify_token)):
        """
        Replace the settings snapshot.

        Settings live in memory only and reset to the environment defaults
        when the daemon restarts.
        """
        daemon.update_settings(settings)
        return settings

    @app.get("/api/health")
    async def health_check():
        """
        Health check endpoint (no auth required).

        Example:
            curl -X GET http://localhost:8766/api/health
        """
        return {"status": "healthy", "service": "vibetime-daemon"}

    @app.get("/api/status")
    async def daemon_status(authorized: bool = Depends(verify_token)):
        """Daemon status and configuration information."""
        return {
            "status": "running",
            "busy": daemon.executor.is_busy,
            "schedule_enabled": config.schedule_enabled,
            "output": type(daemon.backend).__name__,
            "api_port": config.api_port,
        }

    return app
