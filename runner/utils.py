from __future__ import annotations

from token_broker.domain.tokens import TokenError, decode_access_token
from runner.types import IssuedToken, now_ms


def check_token(issued: IssuedToken, *, secret_key: str | None = None) -> dict:
    """Decode one issued token and report whether it looks right."""
    out: dict = {"kind": issued.kind, "latency_ms": issued.latency_ms}
    try:
        claims = decode_access_token(
            issued.token, secret_key=secret_key, now_s=now_ms() // 1000
        )
    except TokenError as e:
        out.update(ok=False, error_code=e.code, error_message=str(e))
        return out
    if claims.vxa.value != issued.kind:
        out.update(
            ok=False,
            error_code="action_mismatch",
            error_message=f"expected vxa={issued.kind}, got {claims.vxa.value}",
        )
        return out
    out.update(ok=True, verified=secret_key is not None, expires=claims.exp)
    return out


def summarize(results: list[dict]) -> tuple[dict, int]:
    """Compute summary dict and an exit code from per-token checks."""
    failures = [r for r in results if not r.get("ok")]
    latencies = [r["latency_ms"] for r in results]
    summary = {
        "component": "runner",
        "event": "summary",
        "issued": len(results),
        "failed": len(failures),
        "max_latency_ms": max(latencies) if latencies else 0.0,
        "results": results,
    }
    exit_code = 0 if (results and not failures) else 1
    return summary, exit_code
