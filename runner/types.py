from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class IssuedToken:
    """A token returned by the broker during the smoke run."""

    kind: str
    token: str
    latency_ms: float


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class TokenRequestError(SmokeError):
    """Raised when /createToken keeps failing after retries."""


def now_ms() -> int:
    """Return current time in epoch milliseconds."""
    return int(time.time() * 1000)
