"""Engagement (store review) prompt scheduling.

The platform prompt is fire-and-forget and enforces its own long-horizon
quota that cannot be queried. This scheduler adds two local rules on top:

 - no attempt before ``min_launches_before_first_prompt`` process starts
 - no attempt within ``min_interval_between_attempts`` of the previous one

Every attempt is recorded, whether or not the platform showed anything.

Persistence is best-effort: when the store fails, the in-memory counters
remain authoritative for the rest of the process and the failure is logged.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Set

from .errors import PersistenceUnavailable
from .interfaces import EngagementPrompt, KeyValueStore
from .models import KEY_LAST_PROMPT_AT, KEY_LAUNCH_COUNT, PromptOutcome, PromptPolicy

__all__ = ["EngagementPromptScheduler", "utc_now"]

_log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class EngagementPromptScheduler:
    def __init__(
        self,
        store: KeyValueStore,
        prompt: EngagementPrompt,
        policy: PromptPolicy | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._prompt = prompt
        self.policy = policy or PromptPolicy()
        self._clock = clock
        self._launch_recorded = False
        self._degraded: Set[str] = set()
        self._launch_count = self._read_launch_count()
        # A failed read must not be written back as if the count were zero
        self._count_unreliable = KEY_LAUNCH_COUNT in self._degraded
        self._last_prompt_at = self._read_last_prompt_at()

    # ------------------------------------------------------------------
    # Store access (never raises)
    # ------------------------------------------------------------------
    def _degrade(self, key: str, exc: Exception) -> None:
        if key in self._degraded:
            _log.debug("Persistence still unavailable for %s: %s", key, exc)
            return
        self._degraded.add(key)
        _log.warning("Persistence unavailable for %s, using in-memory value: %s", key, exc)

    def _read(self, key: str) -> Any:
        try:
            return self._store.get(key)
        except PersistenceUnavailable as e:
            self._degrade(key, e)
            return None

    def _write(self, key: str, value: Any) -> bool:
        try:
            self._store.set(key, value)
            return True
        except PersistenceUnavailable as e:
            self._degrade(key, e)
            return False

    def _read_launch_count(self) -> int:
        raw = self._read(KEY_LAUNCH_COUNT)
        if raw is None:
            return 0
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            _log.warning("Ignoring invalid stored launch count %r", raw)
            return 0
        return raw

    def _read_last_prompt_at(self) -> Optional[datetime]:
        raw = self._read(KEY_LAST_PROMPT_AT)
        if raw is None:
            return None
        try:
            return _as_utc(datetime.fromisoformat(str(raw)))
        except ValueError:
            _log.warning("Ignoring invalid stored prompt timestamp %r", raw)
            return None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def launch_count(self) -> int:
        return self._launch_count

    @property
    def last_prompt_at(self) -> Optional[datetime]:
        return self._last_prompt_at

    @property
    def launch_recorded(self) -> bool:
        return self._launch_recorded

    def snapshot(self) -> Dict[str, Any]:
        return {
            "launch_count": self._launch_count,
            "last_prompt_at": (
                self._last_prompt_at.isoformat() if self._last_prompt_at is not None else None
            ),
            "launch_recorded": self._launch_recorded,
            "min_launches_before_first_prompt": self.policy.min_launches_before_first_prompt,
            "min_interval_s": self.policy.min_interval_between_attempts.total_seconds(),
            "degraded_keys": sorted(self._degraded),
        }

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def record_launch(self) -> int:
        """Count this process start. Returns the updated launch count."""
        if self._launch_recorded:
            _log.warning("record_launch() called twice in one process; ignoring")
            return self._launch_count
        self._launch_recorded = True
        self._launch_count += 1
        if self._count_unreliable:
            _log.warning(
                "Launch count was unreadable at startup; not persisting in-memory count %d",
                self._launch_count,
            )
        else:
            self._write(KEY_LAUNCH_COUNT, self._launch_count)
        _log.info("Launch #%d recorded", self._launch_count)
        return self._launch_count

    def is_eligible(self, now: datetime | None = None) -> bool:
        now = _as_utc(now if now is not None else self._clock())
        if self._launch_count < self.policy.min_launches_before_first_prompt:
            return False
        if self._last_prompt_at is not None:
            if now - self._last_prompt_at < self.policy.min_interval_between_attempts:
                return False
        return True

    def evaluate_and_maybe_prompt(self, now: datetime | None = None) -> PromptOutcome:
        if not self._launch_recorded:
            raise RuntimeError("record_launch() must run before evaluate_and_maybe_prompt()")
        now = _as_utc(now if now is not None else self._clock())
        if not self.is_eligible(now):
            _log.debug(
                "Prompt not eligible (launches=%d, last=%s)",
                self._launch_count,
                self._last_prompt_at,
            )
            return PromptOutcome.NOT_ELIGIBLE
        self._attempt(now)
        return PromptOutcome.ATTEMPTED

    def request_from_user(self, now: datetime | None = None) -> PromptOutcome:
        """User explicitly asked to rate the app; bypasses the local policy."""
        now = _as_utc(now if now is not None else self._clock())
        self._attempt(now)
        return PromptOutcome.ATTEMPTED

    def _attempt(self, now: datetime) -> None:
        try:
            self._prompt.request()
        except Exception:  # noqa: BLE001 - platform call is fire-and-forget
            _log.exception("Engagement prompt capability raised; attempt still counted")
        self._last_prompt_at = now
        self._write(KEY_LAST_PROMPT_AT, now.isoformat())
        _log.info("Engagement prompt attempted at %s", now.isoformat())
