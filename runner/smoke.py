#!/usr/bin/env python3
"""High-level smoke runner against a running token broker.

Steps:
- wait for server health
- request a login token and a join token
- decode each token (and verify its signature when the secret is known)
- emit a compact summary and exit code
"""
from __future__ import annotations

import asyncio
import sys

import httpx

from runner.cli import parse_args
from runner.client import request_token, wait_for_health
from runner.types import SmokeError
from runner.utils import check_token, summarize
from token_broker.logging_conf import get_logger, setup_logging

setup_logging()
logger = get_logger("runner")


async def run_smoke(
    *,
    base_url: str,
    user_id: str,
    channel_id: str,
    secret_key: str | None = None,
    timeout_s: float = 20.0,
    verify_tls: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    async with httpx.AsyncClient(
        base_url=base_url, timeout=10.0, verify=verify_tls, transport=transport
    ) as client:
        await wait_for_health(client, timeout_s=timeout_s)
        bodies = [
            {"type": "login", "userId": user_id},
            {"type": "join", "userId": user_id, "channelID": channel_id},
        ]
        issued = [await request_token(client, body) for body in bodies]

    results = [check_token(t, secret_key=secret_key) for t in issued]
    summary, exit_code = summarize(results)
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        code = asyncio.run(
            run_smoke(
                base_url=args.base_url,
                user_id=args.user_id,
                channel_id=args.channel_id,
                secret_key=args.secret_key,
                timeout_s=args.timeout,
                verify_tls=not args.insecure,
            )
        )
    except SmokeError as e:
        logger.error("runner.failed", extra={"event": "runner_failed", "error": str(e)})
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
