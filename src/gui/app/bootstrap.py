"""Application bootstrap for launch gating.

Responsibilities:
 - Build the namespace-scoped key-value store under the data directory
 - Construct the prompt scheduler, the remote gate and the root controller
 - Choose the signal source (HTTP when a signal URL is configured)
 - Attach the in-process logging service to a fresh event bus
 - Optionally create the Qt bridge when PyQt6 is present and not headless

Every collaborator can be injected; tests pass in-memory stores and static
signal sources. Nothing is registered globally; the returned ``AppContext``
owns the single instance of each component.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from config import settings
from gating.engagement import EngagementPromptScheduler, utc_now
from gating.interfaces import EngagementPrompt, KeyValueStore, RemoteSurface, SignalSource
from gating.kv_store import JsonFileStore
from gating.models import PromptPolicy
from gating.remote_gate import RemoteGateController
from gating.signal_source import HttpSignalSource, StaticSignalSource
from gui.root_controller import RootController
from gui.services.event_bus import EventBus
from gui.services.logging_service import LoggingService

try:  # Lazy / optional Qt import
    from gui.qt_bridge import GateModeBridge  # type: ignore

    _QT_AVAILABLE = True
except Exception:  # noqa: BLE001
    GateModeBridge = None  # type: ignore
    _QT_AVAILABLE = False

_log = logging.getLogger(__name__)


class LoggingRemoteSurface:
    """Surface used when the host app supplies none; records requests only."""

    def __init__(self) -> None:
        self.loaded: list[str] = []
        self.dismissed = False

    def load(self, url: str) -> None:
        self.loaded.append(url)
        _log.info("Remote surface asked to load %s", url)

    def dismiss(self) -> None:
        self.dismissed = True
        _log.info("Remote surface dismissed")


class LoggingEngagementPrompt:
    """Prompt used when the host app supplies none; counts requests only."""

    def __init__(self) -> None:
        self.requests = 0

    def request(self) -> None:
        self.requests += 1
        _log.info("Engagement prompt requested")


@dataclass
class AppContext:
    """Container with references created during bootstrap.

    Attributes
    ----------
    root: Root controller the UI observes
    gate / scheduler: The two components owned by the root controller
    store: Persistence for this app's namespace
    event_bus: Bus carrying mode / prompt events
    logging_service: Ring buffer of recent gating log records
    qt_bridge: GateModeBridge instance (None if headless or Qt missing)
    """

    root: RootController
    gate: RemoteGateController
    scheduler: EngagementPromptScheduler
    store: KeyValueStore
    event_bus: EventBus
    logging_service: LoggingService
    namespace: str
    data_dir: str
    headless: bool
    qt_bridge: Optional[Any] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def shutdown(self) -> None:
        self.logging_service.detach()
        if self.qt_bridge is not None:
            self.qt_bridge.disconnect_bus()


def default_signal_source(url: str | None = None, timeout: float | None = None) -> SignalSource:
    url = settings.SIGNAL_URL if url is None else url
    if url:
        return HttpSignalSource(url, timeout=timeout)
    _log.info("No signal URL configured; gate will open the native app")
    return StaticSignalSource()


def create_app(
    *,
    namespace: str = settings.DEFAULT_NAMESPACE,
    data_dir: str | None = None,
    policy: PromptPolicy | None = None,
    store: KeyValueStore | None = None,
    signal_source: SignalSource | None = None,
    surface: RemoteSurface | None = None,
    prompt: EngagementPrompt | None = None,
    clock: Callable[[], datetime] = utc_now,
    signal_timeout: float | None = None,
    headless: bool | None = None,
    attach_logging: bool = True,
) -> AppContext:
    """Create the launch-gating context for one app process."""
    if headless is None:
        headless = not _QT_AVAILABLE
    data_dir = data_dir if data_dir is not None else settings.DATA_DIR
    if store is None:
        os.makedirs(data_dir, exist_ok=True)
        store = JsonFileStore(data_dir, namespace)

    bus = EventBus()
    logging_service = LoggingService(event_bus=bus)
    if attach_logging:
        logging_service.attach()

    scheduler = EngagementPromptScheduler(
        store, prompt or LoggingEngagementPrompt(), policy, clock=clock
    )
    gate = RemoteGateController(
        signal_source or default_signal_source(timeout=signal_timeout),
        store,
        surface or LoggingRemoteSurface(),
        signal_timeout=signal_timeout,
    )
    root = RootController(gate, scheduler, event_bus=bus, clock=clock)

    qt_bridge = None
    if not headless and _QT_AVAILABLE:
        qt_bridge = GateModeBridge(bus)

    return AppContext(
        root=root,
        gate=gate,
        scheduler=scheduler,
        store=store,
        event_bus=bus,
        logging_service=logging_service,
        namespace=namespace,
        data_dir=data_dir,
        headless=headless,
        qt_bridge=qt_bridge,
        metadata={
            "qt_available": _QT_AVAILABLE,
            "policy": scheduler.snapshot(),
            "signal_timeout_s": signal_timeout if signal_timeout is not None else settings.SIGNAL_TIMEOUT_S,
        },
    )


__all__ = [
    "AppContext",
    "create_app",
    "default_signal_source",
    "LoggingRemoteSurface",
    "LoggingEngagementPrompt",
]
