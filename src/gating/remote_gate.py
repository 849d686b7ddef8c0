"""Remote gate controller: native app vs. embedded remote surface.

The gate is resolved once per process:

    UNDETERMINED --fetch ok, no redirect------------------> NATIVE
    UNDETERMINED --fetch ok, redirect---------------------> REMOTE_SURFACE
    UNDETERMINED --fetch ok, redirect + consent-----------> REMOTE_SURFACE_PENDING_CONSENT
    REMOTE_SURFACE_PENDING_CONSENT --acknowledge()--------> NATIVE
    UNDETERMINED --failure / timeout / malformed----------> NATIVE

NATIVE and REMOTE_SURFACE are terminal. Exactly one fetch is issued per
controller instance; concurrent callers share the in-flight task.

The fetch task is never cancelled by callers (``asyncio.shield``), so a
caller that times out or is cancelled while the app sits in the background
does not abort the resolution.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from config import settings

from .errors import FetchFailure, PersistenceUnavailable
from .interfaces import KeyValueStore, RemoteSurface, SignalSource
from .models import KEY_ACKNOWLEDGED, GateDecision, GateMode

__all__ = ["RemoteGateController"]

_log = logging.getLogger(__name__)


class RemoteGateController:
    def __init__(
        self,
        source: SignalSource,
        store: KeyValueStore,
        surface: RemoteSurface,
        *,
        signal_timeout: float | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._surface = surface
        self._timeout = signal_timeout if signal_timeout is not None else settings.SIGNAL_TIMEOUT_S
        self._decision = GateDecision.undetermined()
        self._task: Optional[asyncio.Task[GateDecision]] = None
        self._fetch_count = 0
        # In-memory mirror so a failed write still reads back as acknowledged
        self._ack_override: Optional[bool] = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def current(self) -> GateDecision:
        return self._decision

    @property
    def fetch_count(self) -> int:
        return self._fetch_count

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def acknowledged(self) -> bool:
        if self._ack_override is not None:
            return self._ack_override
        try:
            # Only a stored boolean true counts; "false" or 1 from a hand-edited file do not
            return self._store.get(KEY_ACKNOWLEDGED, False) is True
        except PersistenceUnavailable as e:
            _log.warning("Acknowledgement flag unreadable, assuming False: %s", e)
            return False

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _ensure_started(self) -> asyncio.Task[GateDecision]:
        if self._task is None:
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self._fetch_and_resolve())
            self._fetch_count += 1
        return self._task

    async def resolve(self) -> GateDecision:
        """Await the gate decision, issuing the fetch on first use."""
        if self._decision.is_resolved:
            return self._decision
        task = self._ensure_started()
        await asyncio.shield(task)
        return self._decision

    def poll(self) -> GateDecision:
        """Start the fetch if needed and return the current decision without waiting.

        Must be called from within a running event loop while the gate is
        still undetermined.
        """
        if not self._decision.is_resolved:
            self._ensure_started()
        return self._decision

    async def _fetch_and_resolve(self) -> GateDecision:
        try:
            signal = await asyncio.wait_for(self._source.fetch(), timeout=self._timeout)
        except asyncio.TimeoutError:
            _log.warning("Remote signal timed out after %.1fs; opening native app", self._timeout)
            return self._apply(GateDecision.native())
        except FetchFailure as e:
            _log.warning("Remote signal unavailable (%s); opening native app", e)
            return self._apply(GateDecision.native())
        except Exception:  # noqa: BLE001 - any source failure fails open
            _log.exception("Remote signal source crashed; opening native app")
            return self._apply(GateDecision.native())
        return self._apply(signal.to_decision())

    def _apply(self, decision: GateDecision) -> GateDecision:
        if self._decision.is_resolved:
            # Already decided; resolution is immutable for the process
            return self._decision
        self._decision = decision
        _log.info("Gate resolved: %s", decision.mode.value)
        if decision.url is not None:
            try:
                self._surface.load(decision.url)
            except Exception:  # noqa: BLE001 - rendering is the UI's concern
                _log.exception("Remote surface failed to accept %s", decision.url)
        return decision

    # ------------------------------------------------------------------
    # Consent flow
    # ------------------------------------------------------------------
    def acknowledge(self) -> GateDecision:
        """User activated the affirmation control: persist the flag and go native."""
        if self._decision.mode is not GateMode.REMOTE_SURFACE_PENDING_CONSENT:
            _log.info("Ignoring acknowledgement in mode %s", self._decision.mode.value)
            return self._decision
        self._ack_override = True
        try:
            self._store.set(KEY_ACKNOWLEDGED, True)
        except PersistenceUnavailable as e:
            _log.warning("Acknowledgement kept in memory only: %s", e)
        self._decision = GateDecision.native()
        try:
            self._surface.dismiss()
        except Exception:  # noqa: BLE001
            _log.exception("Remote surface failed to dismiss")
        _log.info("Gate acknowledged; switched to native")
        return self._decision

    def reset_acknowledgement(self) -> None:
        """Deliberately clear the persisted acknowledgement flag."""
        self._ack_override = False
        try:
            self._store.delete(KEY_ACKNOWLEDGED)
        except PersistenceUnavailable as e:
            _log.warning("Acknowledgement reset kept in memory only: %s", e)
