"""Service layer exports.

Responsibilities:
 - EventBus publish/subscribe core
 - In-process logging ring buffer
"""

from .event_bus import EventBus, GUIEvent  # noqa: F401
from .logging_service import LoggingService  # noqa: F401

__all__ = [
    "EventBus",
    "GUIEvent",
    "LoggingService",
]
