"""
Configuration Management for VibeTime

Loads configuration from environment variables with sensible defaults.
Builds the immutable encoding config and timing profile on demand.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from vibetime.pattern.models import TimingProfile, VibeConfig

# Load .env file from project root (if it exists)
# This should run once when the module is imported
_project_root = Path(
    __file__
).parent.parent.parent.parent  # vibetime/utils -> src/vibetime/utils -> src -> project root
_env_path = _project_root / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def expand_path(path: str) -> str:
    """
    Expand user home directory (~) and environment variables in a path.

    Args:
        path: Path string potentially containing ~ or $VAR

    Returns:
        Fully expanded absolute path
    """
    return str(Path(os.path.expandvars(os.path.expanduser(path))).resolve())


def env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag ("1", "true", "yes", "on" are true, case-insensitive)."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def env_int(name: str, default: int) -> int:
    """Read an integer setting, raising ValueError with the variable name if malformed."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'")


class VibeTimeConfig:
    """
    Central configuration for VibeTime.

    Loads settings from environment variables with fallback defaults.
    Encoding and timing values are validated when the vibe_config and
    timing models are built.
    """

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Core paths
        self.vibetime_home: str = expand_path(os.getenv("VIBETIME_HOME", "~/.vibetime"))

        # Encoding
        self.use_12_hour_format: bool = env_bool("VIBETIME_USE_12_HOUR", False)
        self.include_hours: bool = env_bool("VIBETIME_INCLUDE_HOURS", True)
        self.include_minutes: bool = env_bool("VIBETIME_INCLUDE_MINUTES", True)
        self.tally_base: int = env_int("VIBETIME_TALLY_BASE", 5)
        self.audio_enabled: bool = env_bool("VIBETIME_AUDIO_ENABLED", False)

        # Buzz schedule
        self.schedule_enabled: bool = env_bool("VIBETIME_SCHEDULE_ENABLED", True)
        self.buzz_interval: int = env_int("VIBETIME_BUZZ_INTERVAL", 15)
        self.start_minute: int = env_int("VIBETIME_START_MINUTE", 0)

        # Timing profile (milliseconds)
        self.long_pulse_ms: int = env_int("VIBETIME_LONG_PULSE_MS", 250)
        self.short_pulse_ms: int = env_int("VIBETIME_SHORT_PULSE_MS", 100)
        self.inter_pulse_gap_ms: int = env_int("VIBETIME_INTER_PULSE_GAP_MS", 70)
        self.separator_gap_ms: int = env_int("VIBETIME_SEPARATOR_GAP_MS", 400)

        # Output
        self.output_backend: Optional[str] = os.getenv("VIBETIME_OUTPUT")

        # API configuration
        self.api_port: int = env_int("VIBETIME_API_PORT", 8766)
        self.api_token: Optional[str] = os.getenv("VIBETIME_API_TOKEN")

        # Logging: the pulse stream can be quieted or split from daemon logs
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.output_log_level: Optional[str] = os.getenv("VIBETIME_OUTPUT_LOG_LEVEL")
        output_log_file = os.getenv("VIBETIME_OUTPUT_LOG_FILE")
        self.output_log_file: Optional[str] = (
            expand_path(output_log_file) if output_log_file else None
        )

        # Ensure vibetime_home directory exists
        Path(self.vibetime_home).mkdir(parents=True, exist_ok=True)

    @property
    def vibe_config(self) -> VibeConfig:
        """
        Build the encoding/schedule snapshot.

        Raises:
            pydantic.ValidationError: If a value is outside its documented range
        """
        return VibeConfig(
            use_12_hour_format=self.use_12_hour_format,
            include_hours=self.include_hours,
            include_minutes=self.include_minutes,
            tally_base=self.tally_base,
            buzz_interval=self.buzz_interval,
            start_minute=self.start_minute,
            audio_enabled=self.audio_enabled,
        )

    @property
    def timing(self) -> TimingProfile:
        """Build the timing profile from the configured durations."""
        return TimingProfile(
            long_pulse_ms=self.long_pulse_ms,
            short_pulse_ms=self.short_pulse_ms,
            inter_pulse_gap_ms=self.inter_pulse_gap_ms,
            separator_gap_ms=self.separator_gap_ms,
        )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<VibeTimeConfig(\n"
            f"  vibetime_home={self.vibetime_home},\n"
            f"  tally_base={self.tally_base},\n"
            f"  buzz_interval={self.buzz_interval},\n"
            f"  start_minute={self.start_minute},\n"
            f"  output_backend={self.output_backend},\n"
            f"  api_port={self.api_port}\n"
            f")>"
        )


# Global configuration instance
_config: Optional[VibeTimeConfig] = None


def get_config() -> VibeTimeConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        The global VibeTimeConfig instance

    Example:
        >>> from vibetime.utils.config import get_config
        >>> config = get_config()
        >>> print(config.vibe_config.tally_base)
        5
    """
    global _config
    if _config is None:
        _config = VibeTimeConfig()
    return _config


def reload_config() -> VibeTimeConfig:
    """
    Force reload of configuration from environment variables.

    Useful for testing or when environment changes at runtime.

    Returns:
        Newly created VibeTimeConfig instance
    """
    global _config
    _config = VibeTimeConfig()
    return _config
