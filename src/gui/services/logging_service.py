"""Logging service.

Captures recent log records from the gating packages into a ring buffer so
a diagnostics panel (or the CLI) can show why the gate failed open or why a
prompt was skipped. Each captured record is also published as
``GUIEvent.LOG_RECORD_ADDED`` on the bus the service was constructed with.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from threading import RLock
from typing import Deque, List, Optional, Sequence

from .event_bus import EventBus, GUIEvent

__all__ = [
    "LogEntry",
    "LoggingService",
    "DEFAULT_LOGGER_PREFIXES",
]

DEFAULT_LOGGER_PREFIXES: tuple[str, ...] = ("gating", "gui", "core")


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__(level=logging.DEBUG)
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        self._svc._ingest_record(record)


class LoggingService:
    def __init__(
        self,
        capacity: int = 200,
        *,
        event_bus: EventBus | None = None,
        prefixes: Sequence[str] = DEFAULT_LOGGER_PREFIXES,
        level: int = logging.INFO,
    ) -> None:
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=max(1, capacity))
        self._bus = event_bus
        self._prefixes = tuple(prefixes)
        self._level = level
        self._handler = _RingBufferHandler(self)
        self._attached: List[logging.Logger] = []

    # Lifecycle --------------------------------------------------------
    def attach(self) -> None:
        if self._attached:
            return
        for prefix in self._prefixes:
            lg = logging.getLogger(prefix)
            lg.addHandler(self._handler)
            if lg.level == logging.NOTSET or lg.level > self._level:
                lg.setLevel(self._level)
            self._attached.append(lg)

    def detach(self) -> None:
        for lg in self._attached:
            lg.removeHandler(self._handler)
        self._attached = []

    @property
    def attached(self) -> bool:
        return bool(self._attached)

    # Internal ingestion -----------------------------------------------
    def _ingest_record(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
        )
        with self._lock:
            self._entries.append(entry)
        if self._bus is not None:
            self._bus.publish(GUIEvent.LOG_RECORD_ADDED, asdict(entry))

    # Query ------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(
        self, *, level: str | None = None, name_contains: str | None = None
    ) -> List[LogEntry]:
        return [
            e
            for e in self.recent()
            if (not level or e.level == level) and (not name_contains or name_contains in e.name)
        ]

    def warnings(self) -> List[LogEntry]:
        return [e for e in self.recent() if e.level in ("WARNING", "ERROR", "CRITICAL")]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # Export ------------------------------------------------------------
    def export_jsonl(self, path: str | Path, *, level: str | None = None) -> int:
        """Write entries as JSON Lines. Returns number of lines written."""
        entries = self.filter(level=level)
        with open(path, "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)
