"""
HTTP REST API

FastAPI server for previewing patterns, feeling the time and adjusting settings.
"""

from .server import create_app

__all__ = ["create_app"]
