from __future__ import annotations

import pytest
from httpx import ASGITransport

from runner.smoke import run_smoke
from runner.types import IssuedToken
from runner.utils import check_token, summarize
from tests.conftest import SECRET


@pytest.mark.asyncio
async def test_smoke_run_against_app(app) -> None:
    code = await run_smoke(
        base_url="http://testserver",
        user_id="alice",
        channel_id="lobby",
        secret_key=SECRET,
        timeout_s=2.0,
        transport=ASGITransport(app=app),
    )
    assert code == 0


def test_check_token_flags_wrong_secret(token_service) -> None:
    issued = IssuedToken(kind="login", token=token_service.login("alice"), latency_ms=1.0)

    assert check_token(issued, secret_key=SECRET)["ok"] is True
    result = check_token(issued, secret_key="wrong")
    assert result["ok"] is False
    assert result["error_code"] == "invalid_signature"


def test_check_token_flags_action_mismatch(token_service) -> None:
    issued = IssuedToken(kind="join", token=token_service.login("alice"), latency_ms=1.0)
    assert check_token(issued)["error_code"] == "action_mismatch"


def test_summarize_exit_codes() -> None:
    ok = {"kind": "login", "latency_ms": 2.0, "ok": True}
    bad = {"kind": "join", "latency_ms": 5.0, "ok": False}

    summary, code = summarize([ok])
    assert code == 0 and summary["failed"] == 0

    summary, code = summarize([ok, bad])
    assert code == 1
    assert summary["failed"] == 1
    assert summary["max_latency_ms"] == 5.0

    assert summarize([])[1] == 1


def test_check_token_reports_non_ascii_token() -> None:
    issued = IssuedToken(kind="login", token="e30.é.sig", latency_ms=1.0)
    result = check_token(issued, secret_key=SECRET)
    assert result["ok"] is False
    assert result["error_code"] == "malformed_token"
