"""Key-value persistence for gate and prompt state.

Each persistence namespace (one per app) maps to one small JSON file. Every
``set`` rewrites the file through a temp file + replace so a crash right
after ``record_launch()`` cannot lose the increment or leave a half-written
file behind.

Corrupt files are moved aside (``*.corrupt.<timestamp>``) and the store
starts from defaults; absence of a key always means default/zero.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import PersistenceUnavailable

__all__ = ["JsonFileStore", "MemoryStore", "STATE_SUFFIX"]

STATE_SUFFIX = ".launch_state.json"
_NAMESPACE_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

_log = logging.getLogger(__name__)


class JsonFileStore:
    def __init__(self, base_dir: str | Path, namespace: str) -> None:
        if not _NAMESPACE_RE.match(namespace or ""):
            raise ValueError(f"Invalid persistence namespace: {namespace!r}")
        self.base_dir = Path(base_dir)
        self.namespace = namespace
        self._data: Optional[Dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self.base_dir / f"{self.namespace}{STATE_SUFFIX}"

    # ------------------------------------------------------------------
    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data
        path = self.path
        if not path.exists():
            self._data = {}
            return self._data
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise PersistenceUnavailable(
                f"Cannot read {path}: {e}", context={"path": str(path)}
            ) from e
        try:
            # UnicodeDecodeError is a ValueError; invalid UTF-8 is corruption too
            obj = json.loads(raw.decode("utf-8"))
            if not isinstance(obj, dict):
                raise ValueError("top-level JSON value is not an object")
        except ValueError:
            backup = path.with_name(
                path.name + f".corrupt.{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}"
            )
            try:
                path.replace(backup)
                _log.warning("Corrupt state file moved to %s", backup)
            except OSError:  # pragma: no cover - backup is best-effort
                _log.warning("Corrupt state file %s could not be moved aside", path)
            obj = {}
        self._data = obj
        return self._data

    def _write(self, data: Dict[str, Any]) -> None:
        path = self.path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise PersistenceUnavailable(
                f"Cannot write {path}: {e}", context={"path": str(path)}
            ) from e

    # Public API ---------------------------------------------------------
    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = dict(self._load())
        data[key] = value
        self._write(data)
        self._data = data

    def delete(self, key: str) -> None:
        current = self._load()
        if key not in current:
            return
        data = {k: v for k, v in current.items() if k != key}
        self._write(data)
        self._data = data

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._load())


class MemoryStore:
    """Process-local store; used for tests and for apps that opt out of persistence."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self.writes = 0

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.writes += 1

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)
