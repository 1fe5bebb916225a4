"""
Core module - configuration, database, clock and response formatting.
"""
from .config import Settings, get_settings
from .db import get_session, Base, engine, AsyncSessionLocal
from .clock import Clock, SystemClock, FixedClock, get_clock
from .responses import (
    HTTP_STATUS_BY_KIND,
    success_response,
    error_response,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "get_session",
    "Base",
    "engine",
    "AsyncSessionLocal",
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
    "get_clock",
    # Responses
    "HTTP_STATUS_BY_KIND",
    "success_response",
    "error_response",
]
