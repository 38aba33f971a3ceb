from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from token_broker.logging_conf import get_logger
from runner.types import IssuedToken, SmokeError, TokenRequestError

logger = get_logger("runner.client")


async def wait_for_health(
    client: httpx.AsyncClient, timeout_s: float = 20.0, poll_s: float = 0.25
) -> None:
    """Ping /health until it returns ok or raise after a timeout."""
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        try:
            r = await client.get("/health")
            if r.status_code == 200 and r.json().get("ok") is True:
                logger.info("health.ok", extra={"event": "health_ok"})
                return
        except httpx.HTTPError:
            pass
        await asyncio.sleep(poll_s)
    raise SmokeError("Health check did not pass within timeout")


async def request_token(
    client: httpx.AsyncClient, body: dict[str, Any], *, retries: int = 3
) -> IssuedToken:
    """POST /createToken and return the token header, with basic retry.

    - Retries transport errors and 5xx responses up to `retries` times
    - A 4xx response is final: the request itself is wrong
    """
    kind = str(body.get("type"))
    last_err: Exception | None = None
    for attempt in range(retries):
        start = time.perf_counter()
        try:
            r = await client.post("/createToken", json=body)
            if 400 <= r.status_code < 500:
                raise TokenRequestError(f"{kind} rejected with {r.status_code}: {r.text}")
            r.raise_for_status()
            token = r.headers.get("token", "")
            if not token:
                raise SmokeError(f"{kind} response carried no token header")
            return IssuedToken(
                kind=kind,
                token=token,
                latency_ms=round((time.perf_counter() - start) * 1000.0, 2),
            )
        except httpx.HTTPError as e:  # pragma: no cover - network flakiness
            last_err = e
            logger.warning(
                "token.retry",
                extra={
                    "event": "token_retry",
                    "kind": kind,
                    "attempt": attempt + 1,
                    "error": str(e),
                },
            )
    raise TokenRequestError(str(last_err) if last_err else f"{kind} token request failed")
