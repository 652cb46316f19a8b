"""Output backend registry."""

import logging
import os
from typing import Optional

from vibetime.output.base import OutputBackend
from vibetime.output.console import ConsoleBackend
from vibetime.output.log import LogBackend

logger = logging.getLogger("vibetime.output")

# Registry of available backends (checked in order for auto-detection).
# Console claims interactive terminals; log always works and comes last.
_BACKENDS: list[tuple[str, type[OutputBackend]]] = [
    ("console", ConsoleBackend),
    ("log", LogBackend),
]


def get_backend(name: Optional[str] = None) -> Optional[OutputBackend]:
    """Get an output backend by name, or auto-detect from environment.

    Args:
        name: Backend name (e.g., "console"). If None, use the VIBETIME_OUTPUT
              env var or the first backend usable here: console on a
              terminal, log otherwise.

    Returns:
        Configured OutputBackend instance, or None if no backend available.
    """
    name = name or os.environ.get("VIBETIME_OUTPUT")

    if name:
        for backend_name, backend_cls in _BACKENDS:
            if backend_name == name:
                return backend_cls.from_env()
        logger.warning(f"Unknown output backend: {name}")
        return None

    for backend_name, backend_cls in _BACKENDS:
        backend = backend_cls.from_env()
        if backend is not None:
            logger.debug(f"Auto-detected output backend: {backend_name}")
            return backend

    return None


__all__ = ["ConsoleBackend", "LogBackend", "OutputBackend", "get_backend"]
