"""Async HTTP utilities using httpx."""

from __future__ import annotations

import asyncio
import httpx
from typing import Any, Optional
from config import settings


class AsyncHttpError(RuntimeError):
    pass


async def fetch_json(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    retries: int | None = None,
    backoff: float | None = None,
    timeout: float | None = None,
) -> Any:
    """GET ``url`` and decode the body as JSON.

    Transport errors and non-2xx statuses are retried with exponential
    backoff; a body that is not valid JSON is not retried.
    """
    retries = retries if retries is not None else settings.SIGNAL_RETRIES
    backoff = backoff if backoff is not None else settings.DEFAULT_BACKOFF_FACTOR
    close_client = False
    if client is None:
        headers = {"User-Agent": settings.DEFAULT_USER_AGENT, "Accept": "application/json"}
        client = httpx.AsyncClient(
            headers=headers, timeout=timeout if timeout is not None else settings.SIGNAL_TIMEOUT_S
        )
        close_client = True
    try:
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = await client.get(url)
                resp.raise_for_status()
            except (httpx.TimeoutException, httpx.HTTPError) as e:
                if attempt > retries:
                    raise AsyncHttpError(f"Failed after {attempt} attempts: {e}") from e
                await asyncio.sleep(backoff * (2 ** (attempt - 1)))
                continue
            try:
                return resp.json()
            except ValueError as e:
                raise AsyncHttpError(f"Response from {url} is not JSON: {e}") from e
    finally:
        if close_client:
            await client.aclose()
