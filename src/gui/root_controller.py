"""Root controller composing the launch gate and the prompt scheduler.

The UI layer observes a single value, :attr:`RootController.mode`, either by
reading it or by subscribing to ``GUIEvent.MODE_CHANGED`` on the event bus.
While the remote signal is outstanding the mode is ``UNDETERMINED`` and the
UI renders a neutral loading placeholder.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from gating.engagement import EngagementPromptScheduler, utc_now
from gating.models import GateDecision, PromptOutcome
from gating.remote_gate import RemoteGateController

from .services.event_bus import EventBus, GUIEvent

__all__ = ["RootController"]

_log = logging.getLogger(__name__)


class RootController:
    def __init__(
        self,
        gate: RemoteGateController,
        scheduler: EngagementPromptScheduler,
        *,
        event_bus: EventBus | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.gate = gate
        self.scheduler = scheduler
        self.bus = event_bus or EventBus()
        self._clock = clock
        self._mode = GateDecision.undetermined()
        self._started = False

    @property
    def mode(self) -> GateDecision:
        return self._mode

    @property
    def started(self) -> bool:
        return self._started

    def _publish_mode(self, decision: GateDecision) -> None:
        self._mode = decision
        self.bus.publish(GUIEvent.MODE_CHANGED, decision)

    # ------------------------------------------------------------------
    # Lifecycle signals
    # ------------------------------------------------------------------
    async def on_process_start(self) -> GateDecision:
        """Cold start: count the launch, then wait for the gate."""
        if self._started:
            raise RuntimeError("on_process_start() may only run once per process")
        self._started = True
        launches = self.scheduler.record_launch()
        self.bus.publish(GUIEvent.PROCESS_STARTED, {"launch_count": launches})
        self._publish_mode(self.gate.poll())
        decision = await self.gate.resolve()
        # A foreground poll may already have published the resolved mode
        if decision != self._mode:
            self._publish_mode(decision)
        return decision

    def on_foregrounded(self, now: datetime | None = None) -> PromptOutcome:
        """App returned to the foreground: refresh mode, maybe prompt."""
        if not self._started:
            raise RuntimeError("on_foregrounded() received before on_process_start()")
        decision = self.gate.poll()
        if decision != self._mode:
            self._publish_mode(decision)
        outcome = self.scheduler.evaluate_and_maybe_prompt(now if now is not None else self._clock())
        self.bus.publish(GUIEvent.PROMPT_EVALUATED, outcome)
        return outcome

    # ------------------------------------------------------------------
    # UI actions
    # ------------------------------------------------------------------
    def acknowledge_remote_surface(self) -> GateDecision:
        before = self.gate.current
        decision = self.gate.acknowledge()
        if decision != before:
            self.bus.publish(GUIEvent.ACKNOWLEDGED, decision)
            self._publish_mode(decision)
        return decision
