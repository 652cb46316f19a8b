"""
Manual time feeler for testing.

This CLI tool encodes a time and plays it on a local output backend
without running the daemon. Useful for:
- Checking what a time feels like under different settings
- Debugging output backends
- Comparing tally bases

Usage:
    uv run python -m vibetime.debug.feel_time 14:37
    uv run python -m vibetime.debug.feel_time now --12h
    uv run python -m vibetime.debug.feel_time --describe-only --base 10 23:59
    uv run python -m vibetime.debug.feel_time --test-times
"""

import argparse
import asyncio
import logging
import sys

from vibetime.output import get_backend
from vibetime.output.console import ConsoleBackend
from vibetime.pattern.encoder import (
    TEST_TIMES,
    build_pattern,
    describe_pattern,
    pattern_duration_ms,
    vibration_status,
)
from vibetime.pattern.executor import SequenceExecutor
from vibetime.pattern.models import TimingProfile, VibeConfig
from vibetime.utils.config import get_config
from vibetime.utils.time_parser import parse_clock_time

# Configure logging for CLI output
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("vibetime.debug.feel_time")


def build_settings(args: argparse.Namespace) -> VibeConfig:
    """Overlay command-line flags on the configured settings snapshot."""
    settings = get_config().vibe_config
    overrides = {}

    if args.base is not None:
        overrides["tally_base"] = args.base
    if args.twelve_hour:
        overrides["use_12_hour_format"] = True
    if args.no_hours:
        overrides["include_hours"] = False
    if args.no_minutes:
        overrides["include_minutes"] = False
    if args.audio:
        overrides["audio_enabled"] = True

    # model_copy skips validation, so round-trip through the constructor
    return VibeConfig(**{**settings.model_dump(), **overrides})


async def play_time(
    hour: int,
    minute: int,
    settings: VibeConfig,
    timing: TimingProfile,
    describe_only: bool,
) -> int:
    """
    Describe and play one time.

    Returns:
        Exit code (0 for success, 1 if nothing was played)
    """
    config = get_config()
    print(f"{hour:02d}:{minute:02d}  {describe_pattern(hour, minute, settings)}")

    status = vibration_status(hour, minute, settings)
    if status:
        print(status)
        return 0

    pattern = build_pattern(hour, minute, settings, timing)
    print(f"Duration: {pattern_duration_ms(pattern)}ms")

    if describe_only:
        return 0

    backend = get_backend(config.output_backend) or ConsoleBackend()
    executor = SequenceExecutor()

    played = await executor.execute(
        pattern,
        on_pulse=backend.trigger_haptic_pulse,
        audio_enabled=settings.audio_enabled,
        on_tone=backend.play_tone,
        on_complete=backend.complete,
    )
    if not played:
        logger.error("Executor busy, pattern dropped")
        return 1

    return 0


async def run_feel(args: argparse.Namespace) -> int:
    """
    Execute the feel-time workflow.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        settings = build_settings(args)
        timing = get_config().timing
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        return 1

    if args.test_times:
        times = list(TEST_TIMES)
    else:
        try:
            times = [parse_clock_time(args.time)]
        except ValueError as e:
            logger.error(str(e))
            return 1

    exit_code = 0
    for index, (hour, minute) in enumerate(times):
        if index > 0 and not args.describe_only:
            await asyncio.sleep(1)
        code = await play_time(hour, minute, settings, timing, args.describe_only)
        exit_code = max(exit_code, code)

    return exit_code


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Encode a time as tally pulses and play it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Feel a specific time
    uv run python -m vibetime.debug.feel_time 14:37

    # Feel the current time on a 12-hour clock with tones
    uv run python -m vibetime.debug.feel_time now --12h --audio

    # Only print the description with base-10 tallies
    uv run python -m vibetime.debug.feel_time --describe-only --base 10 23:59
        """,
    )
    parser.add_argument("time", nargs="?", default="now", help="HH:MM or 'now' (default: now)")
    parser.add_argument("--base", type=int, choices=[5, 10], default=None, help="Tally base")
    parser.add_argument("--12h", dest="twelve_hour", action="store_true", help="12-hour clock")
    parser.add_argument("--no-hours", action="store_true", help="Skip the hour component")
    parser.add_argument("--no-minutes", action="store_true", help="Skip the minute component")
    parser.add_argument("--audio", action="store_true", help="Pair pulses with tones")
    parser.add_argument(
        "--describe-only",
        action="store_true",
        help="Print the description and duration without playing",
    )
    parser.add_argument(
        "--test-times",
        action="store_true",
        help="Play the sample times 00:00, 08:05, 14:37 and 23:59",
    )

    args = parser.parse_args()

    exit_code = asyncio.run(run_feel(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
