# Shared fixtures for gating tests. Qt is forced onto the offscreen platform so
# the bridge tests can run headless when PyQt6 is installed.

import asyncio
import os
from datetime import datetime, timezone

import pytest

from gating.kv_store import MemoryStore
from gating.models import RemoteSignal

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class RecordingSurface:
    def __init__(self):
        self.loaded = []
        self.dismissed = 0

    def load(self, url):
        self.loaded.append(url)

    def dismiss(self):
        self.dismissed += 1


class CountingPrompt:
    def __init__(self):
        self.requests = 0

    def request(self):
        self.requests += 1


class GatedSignalSource:
    """Signal source whose fetch blocks until ``release()`` is called."""

    def __init__(self, signal=None, error=None):
        self.signal = signal if signal is not None else RemoteSignal()
        self.error = error
        self.calls = 0
        self._event = None

    def release(self):
        self._gate().set()

    def _gate(self):
        if self._event is None:
            self._event = asyncio.Event()
        return self._event

    async def fetch(self):
        self.calls += 1
        await self._gate().wait()
        if self.error is not None:
            raise self.error
        return self.signal


class FlakyStore(MemoryStore):
    """MemoryStore whose reads/writes can be switched to fail."""

    def __init__(self, initial=None, *, fail_reads=False, fail_writes=False):
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get(self, key, default=None):
        from gating.errors import PersistenceUnavailable

        if self.fail_reads:
            raise PersistenceUnavailable("read failed")
        return super().get(key, default)

    def set(self, key, value):
        from gating.errors import PersistenceUnavailable

        if self.fail_writes:
            raise PersistenceUnavailable("write failed")
        super().set(key, value)

    def delete(self, key):
        from gating.errors import PersistenceUnavailable

        if self.fail_writes:
            raise PersistenceUnavailable("write failed")
        super().delete(key)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def prompt():
    return CountingPrompt()


@pytest.fixture
def t0():
    return datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
