# app/adapters/clients/http_resilience.py
from __future__ import annotations

from typing import Any

import httpx


async def bounded_request(
    method: str,
    url: str,
    *,
    timeout_s: float,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    follow_redirects: bool = False,
    verify: bool | str = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """
    One attempt, hard timeout, non-2xx raised as HTTPStatusError.

    Callers treat every httpx.HTTPError (timeout, transport, status) the same way:
    the tier failed. Nothing here retries or sleeps.
    """
    timeout = httpx.Timeout(float(timeout_s))
    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=follow_redirects,
        verify=verify,
        transport=transport,
    ) as client:
        resp = await client.request(method, url, headers=headers, params=params)
    resp.raise_for_status()
    return resp


def redact_headers(headers: dict[str, str], secret_keys: tuple[str, ...]) -> dict[str, str]:
    safe = dict(headers)
    for k in secret_keys:
        if k in safe:
            safe[k] = f"<redacted len={len(headers[k])}>"
    return safe
