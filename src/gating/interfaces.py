"""Structural interfaces for the collaborators injected into the gating layer."""

from __future__ import annotations

from typing import Any, Protocol

from .models import RemoteSignal

__all__ = ["KeyValueStore", "SignalSource", "RemoteSurface", "EngagementPrompt"]


class KeyValueStore(Protocol):
    """Scalar key/value persistence. ``set`` must be durable before it returns."""

    def get(self, key: str, default: Any = None) -> Any: ...  # pragma: no cover - structural

    def set(self, key: str, value: Any) -> None: ...  # pragma: no cover - structural

    def delete(self, key: str) -> None: ...  # pragma: no cover - structural


class SignalSource(Protocol):
    async def fetch(self) -> RemoteSignal: ...  # pragma: no cover - structural


class RemoteSurface(Protocol):
    """Embedded browser surface. Reports nothing back to the gate."""

    def load(self, url: str) -> None: ...  # pragma: no cover - structural

    def dismiss(self) -> None: ...  # pragma: no cover - structural


class EngagementPrompt(Protocol):
    """Fire-and-forget store review request; there is no "was it shown" signal."""

    def request(self) -> None: ...  # pragma: no cover - structural
