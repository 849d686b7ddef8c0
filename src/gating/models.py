"""Value types shared by the gate controller and the prompt scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Optional

from config import settings

__all__ = [
    "GateMode",
    "GateDecision",
    "RemoteSignal",
    "PromptPolicy",
    "PromptOutcome",
    "KEY_ACKNOWLEDGED",
    "KEY_LAUNCH_COUNT",
    "KEY_LAST_PROMPT_AT",
]

KEY_ACKNOWLEDGED = "gate.acknowledged"
KEY_LAUNCH_COUNT = "engagement.launchCount"
KEY_LAST_PROMPT_AT = "engagement.lastPromptAt"


class GateMode(str, Enum):  # str subclass so modes serialize as plain JSON strings
    UNDETERMINED = "undetermined"
    NATIVE = "native"
    REMOTE_SURFACE = "remote_surface"
    REMOTE_SURFACE_PENDING_CONSENT = "remote_surface_pending_consent"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of the gate for the current process.

    Attributes
    ----------
    mode: Which interface the UI should present.
    url: Remote surface URL (None unless mode is a remote surface).
    consent_required: Whether the UI must render the affirmation control.
    """

    mode: GateMode
    url: Optional[str] = None
    consent_required: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.mode is not GateMode.UNDETERMINED

    @classmethod
    def undetermined(cls) -> "GateDecision":
        return cls(GateMode.UNDETERMINED)

    @classmethod
    def native(cls) -> "GateDecision":
        return cls(GateMode.NATIVE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "url": self.url,
            "consent_required": self.consent_required,
        }


@dataclass(frozen=True)
class RemoteSignal:
    redirect_url: Optional[str] = None
    consent_required: bool = False

    @property
    def redirects(self) -> bool:
        return self.redirect_url is not None

    def to_decision(self) -> GateDecision:
        if self.redirect_url is None:
            return GateDecision.native()
        if self.consent_required:
            return GateDecision(
                GateMode.REMOTE_SURFACE_PENDING_CONSENT, url=self.redirect_url, consent_required=True
            )
        return GateDecision(GateMode.REMOTE_SURFACE, url=self.redirect_url)


@dataclass(frozen=True)
class PromptPolicy:
    min_launches_before_first_prompt: int = settings.DEFAULT_MIN_LAUNCHES
    min_interval_between_attempts: timedelta = timedelta(hours=settings.DEFAULT_MIN_INTERVAL_HOURS)

    def __post_init__(self) -> None:
        if self.min_launches_before_first_prompt < 0:
            raise ValueError("min_launches_before_first_prompt must be >= 0")
        if self.min_interval_between_attempts < timedelta(0):
            raise ValueError("min_interval_between_attempts must not be negative")


class PromptOutcome(str, Enum):
    NOT_ELIGIBLE = "not_eligible"
    ATTEMPTED = "attempted"
