"""Launch gating and engagement prompt scheduling.

Public exports cover the two leaf components, their value types and the
collaborator interfaces. Nothing here imports Qt.
"""

from .engagement import EngagementPromptScheduler, utc_now  # noqa: F401
from .errors import (  # noqa: F401
    FetchFailure,
    GateError,
    PersistenceUnavailable,
    SignalFormatError,
)
from .kv_store import JsonFileStore, MemoryStore  # noqa: F401
from .models import (  # noqa: F401
    GateDecision,
    GateMode,
    PromptOutcome,
    PromptPolicy,
    RemoteSignal,
)
from .remote_gate import RemoteGateController  # noqa: F401
from .signal_source import HttpSignalSource, StaticSignalSource, parse_signal  # noqa: F401

__all__ = [
    "EngagementPromptScheduler",
    "utc_now",
    "RemoteGateController",
    # Models
    "GateDecision",
    "GateMode",
    "PromptOutcome",
    "PromptPolicy",
    "RemoteSignal",
    # Persistence
    "JsonFileStore",
    "MemoryStore",
    # Signal sources
    "HttpSignalSource",
    "StaticSignalSource",
    "parse_signal",
    # Errors
    "GateError",
    "FetchFailure",
    "SignalFormatError",
    "PersistenceUnavailable",
]
