"""UI-facing layer of the launch gating package.

Curated surface for host apps: the root controller they observe, the event
bus it publishes on and the bootstrap helper that wires both.

Design Principles:
- Avoid side-effect heavy imports (no implicit QApplication creation;
  ``gui.qt_bridge`` is imported only by the bootstrap when Qt is present).
- Re-export only what a host app needs to start and observe the gate.
"""

from __future__ import annotations

from .services.event_bus import (  # noqa: F401
    EventBus,
    GUIEvent,
    Event,
)
from .root_controller import RootController  # noqa: F401
from .app.bootstrap import AppContext, create_app  # noqa: F401

__all__ = [
    "EventBus",
    "GUIEvent",
    "Event",
    "RootController",
    "AppContext",
    "create_app",
]
