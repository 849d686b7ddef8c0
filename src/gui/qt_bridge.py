"""Qt adapter exposing the root controller's observable state as signals.

Kept out of the rest of the package so the gating core and its tests never
import PyQt6.
"""

from __future__ import annotations

from typing import List

from PyQt6.QtCore import QObject, pyqtSignal

from gating.models import GateDecision, GateMode

from .services.event_bus import Event, EventBus, GUIEvent, Subscription


class GateModeBridge(QObject):
    """Re-emits bus events as Qt signals for widget bindings.

    ``modeChanged`` carries the :class:`GateDecision`; ``loadingChanged``
    is True while the gate is undetermined (UI shows its placeholder);
    ``consentRequired`` fires when the affirmation control must be shown.
    """

    modeChanged = pyqtSignal(object)
    loadingChanged = pyqtSignal(bool)
    consentRequired = pyqtSignal(str)  # url
    promptEvaluated = pyqtSignal(str)  # PromptOutcome value

    def __init__(self, bus: EventBus, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._bus = bus
        self._subs: List[Subscription] = [
            bus.subscribe(GUIEvent.MODE_CHANGED, self._on_mode),
            bus.subscribe(GUIEvent.PROMPT_EVALUATED, self._on_prompt),
        ]
        self._last: GateDecision = GateDecision.undetermined()

    @property
    def last_decision(self) -> GateDecision:
        return self._last

    def _on_mode(self, evt: Event) -> None:
        decision: GateDecision = evt.payload
        self._last = decision
        self.modeChanged.emit(decision)
        self.loadingChanged.emit(not decision.is_resolved)
        if decision.mode is GateMode.REMOTE_SURFACE_PENDING_CONSENT and decision.url:
            self.consentRequired.emit(decision.url)

    def _on_prompt(self, evt: Event) -> None:
        self.promptEvaluated.emit(getattr(evt.payload, "value", str(evt.payload)))

    def disconnect_bus(self) -> None:
        for sub in self._subs:
            self._bus.unsubscribe(sub)
        self._subs = []
