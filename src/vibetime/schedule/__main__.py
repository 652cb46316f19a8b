"""
Entry point for running the Buzz Daemon as a module.

Usage:
    # Development
    python -m vibetime.schedule

    # With custom log level
    LOG_LEVEL=DEBUG python -m vibetime.schedule
"""

import asyncio
import logging
import sys

from vibetime.schedule.daemon import BuzzDaemon
from vibetime.utils.config import get_config
from vibetime.utils.logging import setup_logging


async def async_main() -> None:
    """Async entry point for the daemon."""
    config = get_config()

    log_file = f"{config.vibetime_home}/logs/daemon.log"
    setup_logging(
        log_level=config.log_level,
        log_file=log_file,
        console=True,
        output_level=config.output_log_level,
        output_file=config.output_log_file,
    )

    logger = logging.getLogger("vibetime.main")
    logger.info("=" * 60)
    logger.info("Starting VibeTime Buzz Daemon")
    logger.info("=" * 60)
    logger.info(f"Tally base: {config.tally_base}")
    logger.info(f"Schedule: every {config.buzz_interval} min from :{config.start_minute:02d}")
    logger.info(f"Output: {config.output_backend or 'log'}")
    logger.info(f"Log file: {log_file}")
    if config.output_log_file:
        logger.info(f"Pulse log file: {config.output_log_file}")
    logger.info("=" * 60)

    try:
        daemon = BuzzDaemon(config)
        await daemon.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    logger.info("VibeTime Buzz Daemon stopped")


def main() -> None:
    """Synchronous entry point."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        # Graceful exit on Ctrl+C (SIGINT is already handled by daemon)
        pass


if __name__ == "__main__":
    main()
