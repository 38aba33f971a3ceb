"""Environment-derived configuration.

Both config objects are built once at startup and passed to the components
that need them; nothing else reads the process environment.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigError
from .logging_conf import get_logger

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_TTL_SECONDS",
    "ISSUER_ENV_VARS",
    "ServerConfig",
    "TokenIssuerConfig",
    "load_env_file",
    "load_server_config",
    "load_issuer_config",
]

logger = get_logger("config")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_TTL_SECONDS = 90

# SERCRET_KEY is misspelled in every deployed .env; keep reading that name.
ISSUER_ENV_VARS = ("ISSUER", "SERCRET_KEY", "DOMAIN", "ADMIN_USER_ID")


class ServerConfig(BaseModel):
    """Where and how the HTTP server listens."""

    model_config = ConfigDict(frozen=True)

    url: str
    port: int = Field(..., ge=1, le=65535)
    host: str = DEFAULT_HOST
    key_path: Optional[str] = None
    cert_path: Optional[str] = None

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme

    @property
    def url_is_secure(self) -> bool:
        return self.scheme == "https"


class TokenIssuerConfig(BaseModel):
    """Credentials for signing Vivox access tokens."""

    model_config = ConfigDict(frozen=True)

    issuer: str = Field(..., min_length=1)
    secret_key: str = Field(..., min_length=1, repr=False)
    domain: str = Field(..., min_length=1)
    admin_user_id: str = Field(..., min_length=1)
    ttl_seconds: int = Field(DEFAULT_TTL_SECONDS, gt=0)


def load_env_file(path: str | os.PathLike[str] = ".env") -> bool:
    """Load variables from a dotenv file without overriding the environment.

    Returns True if the file existed.
    """
    env_path = Path(path)
    if not env_path.is_file():
        logger.info("env.skip", extra={"event": "env_skip", "path": str(env_path)})
        return False
    load_dotenv(env_path, override=False)
    logger.info("env.loaded", extra={"event": "env_loaded", "path": str(env_path)})
    return True


def load_server_config(
    env: Mapping[str, str] | None = None,
    *,
    key_path: str | None = None,
    cert_path: str | None = None,
) -> ServerConfig:
    """Build the ServerConfig from SERVER_URL (and HOST).

    Raises:
        ConfigError: if SERVER_URL is missing, unparsable, not http(s), or
            has no explicit port.
    """
    env = os.environ if env is None else env
    url = env.get("SERVER_URL")
    if not url:
        raise ConfigError("Please define SERVER_URL in your .env file")

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ConfigError(f"SERVER_URL must be an absolute http(s) URL, got {url!r}")
    try:
        port = parts.port
    except ValueError as e:
        raise ConfigError(f"SERVER_URL has an invalid port: {url!r}") from e
    if port is None:
        raise ConfigError(f"SERVER_URL must include a port: {url!r}")
    if not 1 <= port <= 65535:
        raise ConfigError(f"SERVER_URL port must be between 1 and 65535: {url!r}")

    return ServerConfig(
        url=url.rstrip("/"),
        port=port,
        host=env.get("HOST") or DEFAULT_HOST,
        key_path=key_path or None,
        cert_path=cert_path or None,
    )


def load_issuer_config(env: Mapping[str, str] | None = None) -> TokenIssuerConfig:
    """Build the TokenIssuerConfig from ISSUER, SERCRET_KEY, DOMAIN, ADMIN_USER_ID.

    Raises:
        ConfigError: naming every missing variable, or if TOKEN_TTL_SECONDS
            is not a positive integer.
    """
    env = os.environ if env is None else env
    missing = [name for name in ISSUER_ENV_VARS if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing token issuer settings: {', '.join(missing)}")

    raw_ttl = env.get("TOKEN_TTL_SECONDS")
    ttl = DEFAULT_TTL_SECONDS
    if raw_ttl:
        try:
            ttl = int(raw_ttl, 10)
        except ValueError as e:
            raise ConfigError("TOKEN_TTL_SECONDS must be an integer") from e
        if ttl <= 0:
            raise ConfigError("TOKEN_TTL_SECONDS must be positive")

    return TokenIssuerConfig(
        issuer=env["ISSUER"],
        secret_key=env["SERCRET_KEY"],
        domain=env["DOMAIN"],
        admin_user_id=env["ADMIN_USER_ID"],
        ttl_seconds=ttl,
    )
