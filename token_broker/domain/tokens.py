"""Vivox access-token signing.

A token is three base64url segments joined by dots, without padding:

    e30.<claims>.<signature>

The header is always the empty JSON object (`e30` is `{}` encoded), the claims
are compact JSON and the signature is HMAC-SHA256 over `header.claims` keyed
with the issuer secret.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

__all__ = [
    "TOKEN_HEADER",
    "Action",
    "AccessTokenClaims",
    "TokenError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "ExpiredTokenError",
    "new_serial",
    "split_token",
    "encode_access_token",
    "decode_access_token",
]

TOKEN_HEADER = "e30"
_SERIAL_LIMIT = 1 << 31


class Action(str, Enum):
    """Value of the `vxa` claim."""

    login = "login"
    join = "join"
    join_muted = "join_muted"
    kick = "kick"


# ------------------------
# Errors
# ------------------------
class TokenError(ValueError):
    """Base class for token decoding/verification errors."""

    code: str = "invalid_token"


class MalformedTokenError(TokenError):
    code = "malformed_token"


class InvalidSignatureError(TokenError):
    code = "invalid_signature"


class ExpiredTokenError(TokenError):
    code = "expired_token"


# ------------------------
# Schema
# ------------------------
class AccessTokenClaims(BaseModel):
    """Claims carried by a Vivox access token.

    Field names are the wire names; their order is the serialization order.
    """

    iss: str = Field(..., min_length=1)  # issuer
    exp: int = Field(..., ge=0)  # expiry, epoch seconds
    vxa: Action  # action
    vxi: int = Field(..., ge=0)  # per-token serial
    f: str = Field(..., min_length=1)  # acting user URI
    t: Optional[str] = None  # channel URI (join, join_muted, kick)
    sub: Optional[str] = None  # target user URI (kick)


# ------------------------
# Internals
# ------------------------
def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _signature(signing_input: str, secret_key: str) -> str:
    mac = hmac.new(secret_key.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256)
    return _b64encode(mac.digest())


def new_serial() -> int:
    """Return a fresh `vxi` value.

    Drawn at random so that concurrent issuers never share a counter.
    """
    return secrets.randbelow(_SERIAL_LIMIT)


def split_token(token: str) -> tuple[str, str, str]:
    """Split a token into (header, claims, signature) or raise MalformedTokenError."""
    if not isinstance(token, str):
        raise MalformedTokenError("Token must be a string")
    if not token.isascii():
        raise MalformedTokenError("Token must be ASCII")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenError("Token must have three dot-separated segments")
    return parts[0], parts[1], parts[2]


# ------------------------
# Public encode/decode
# ------------------------
def encode_access_token(claims: AccessTokenClaims, *, secret_key: str) -> str:
    """Serialize and sign `claims`."""
    if not secret_key:
        raise ValueError("secret_key must be a non-empty string")
    as_json = json.dumps(
        claims.model_dump(mode="json", exclude_none=True),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    signing_input = f"{TOKEN_HEADER}.{_b64encode(as_json.encode('utf-8'))}"
    return f"{signing_input}.{_signature(signing_input, secret_key)}"


def decode_access_token(
    token: str, *, secret_key: str | None = None, now_s: int | None = None
) -> AccessTokenClaims:
    """Decode a token back into `AccessTokenClaims`.

    The signature is checked when `secret_key` is given and expiry when `now_s`
    is given. Raises a specific `TokenError` subclass on failure.
    """
    header, body, signature = split_token(token)
    if header != TOKEN_HEADER:
        raise MalformedTokenError("Unexpected token header")

    if secret_key is not None:
        expected = _signature(f"{header}.{body}", secret_key)
        if not hmac.compare_digest(expected, signature):
            raise InvalidSignatureError("Token signature does not match")

    try:
        data = json.loads(_b64decode(body).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedTokenError("Token claims are not base64url JSON") from e

    if not isinstance(data, dict):
        raise MalformedTokenError("Token claims must be a JSON object")

    try:
        claims = AccessTokenClaims(**data)
    except ValidationError as e:
        raise MalformedTokenError(f"Token claims invalid: {e}") from e

    if now_s is not None and claims.exp <= now_s:
        raise ExpiredTokenError(f"Token expired at {claims.exp}")

    return claims
