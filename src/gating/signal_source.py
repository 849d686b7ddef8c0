"""Remote signal sources for the launch gate.

Wire format (JSON object):

    {"redirect": null}
    {"redirect": "https://...", "consentRequired": true|false}

Anything else (missing keys, wrong types, non-http(s) URLs) is treated as a
malformed signal and raised as ``SignalFormatError``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from config import settings
from core.async_http import AsyncHttpError, fetch_json

from .errors import FetchFailure, SignalFormatError
from .models import RemoteSignal

__all__ = ["parse_signal", "HttpSignalSource", "StaticSignalSource"]

_log = logging.getLogger(__name__)


def _validate_url(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise SignalFormatError("redirect must be a non-empty string", context={"redirect": raw})
    try:
        url = httpx.URL(raw.strip())
    except (httpx.InvalidURL, TypeError) as e:
        raise SignalFormatError(f"redirect is not a valid URL: {e}", context={"redirect": raw}) from e
    if url.scheme not in ("http", "https") or not url.host:
        raise SignalFormatError("redirect must be an absolute http(s) URL", context={"redirect": raw})
    return str(url)


def parse_signal(payload: Any) -> RemoteSignal:
    if not isinstance(payload, dict):
        raise SignalFormatError(
            "signal must be a JSON object", context={"type": type(payload).__name__}
        )
    if "redirect" not in payload:
        raise SignalFormatError("signal has no 'redirect' key", context={"keys": sorted(payload)})
    redirect = payload["redirect"]
    if redirect is None:
        return RemoteSignal()
    url = _validate_url(redirect)
    consent = payload.get("consentRequired")
    if not isinstance(consent, bool):
        raise SignalFormatError(
            "'consentRequired' must be a boolean when redirecting",
            context={"consentRequired": consent},
        )
    return RemoteSignal(redirect_url=url, consent_required=consent)


class HttpSignalSource:
    """Fetches the signal with a single GET (plus transport retries)."""

    def __init__(
        self,
        url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout if timeout is not None else settings.SIGNAL_TIMEOUT_S
        self._client = client
        self._retries = retries
        self._backoff = backoff

    async def fetch(self) -> RemoteSignal:
        try:
            payload = await fetch_json(
                self.url,
                client=self._client,
                retries=self._retries,
                backoff=self._backoff,
                timeout=self.timeout,
            )
        except AsyncHttpError as e:
            raise FetchFailure(str(e), context={"url": self.url}) from e
        signal = parse_signal(payload)
        _log.debug("Signal from %s: redirect=%s", self.url, signal.redirects)
        return signal


class StaticSignalSource:
    """Returns a fixed signal (or raises a fixed failure) without network access."""

    def __init__(
        self, signal: RemoteSignal | None = None, *, error: FetchFailure | None = None
    ) -> None:
        self.signal = signal if signal is not None else RemoteSignal()
        self.error = error
        self.calls = 0

    async def fetch(self) -> RemoteSignal:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.signal
