"""Error taxonomy for launch gating and prompt scheduling.

None of these reach the end user: fetch failures resolve the gate to the
native app and persistence failures degrade to in-memory values.
"""

from __future__ import annotations
from typing import Any


class GateError(Exception):
    """Base class for gating related issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class FetchFailure(GateError):
    """Raised when the remote signal could not be obtained (network, status, timeout)."""


class SignalFormatError(FetchFailure):
    """Raised when a fetched signal is malformed or only partially received."""


class PersistenceUnavailable(GateError):
    """Raised by a key-value store that cannot read or write its backing file."""
