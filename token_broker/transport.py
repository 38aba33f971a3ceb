"""HTTP vs HTTPS selection and the uvicorn server loop."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import uvicorn

from .config import ServerConfig
from .errors import ConfigError, SchemeMismatchError, TransportError
from .logging_conf import get_logger

__all__ = ["TransportSettings", "resolve_transport", "serve"]

logger = get_logger("transport")


@dataclass(frozen=True)
class TransportSettings:
    """Resolved listening parameters."""

    host: str
    port: int
    url: str
    secure: bool
    key_path: Optional[str] = None
    cert_path: Optional[str] = None

    def uvicorn_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"host": self.host, "port": self.port}
        if self.secure:
            kwargs["ssl_keyfile"] = self.key_path
            kwargs["ssl_certfile"] = self.cert_path
        return kwargs


def _check_readable(path: str) -> None:
    p = Path(path)
    if not p.is_file() or not os.access(p, os.R_OK):
        raise TransportError(
            "Cannot start server in secure mode without private key or certificate "
            f"files: {path} is missing or unreadable"
        )


def resolve_transport(config: ServerConfig) -> TransportSettings:
    """Decide between HTTP and HTTPS and validate the combination.

    Raises:
        ConfigError: if only one of key/cert is given.
        TransportError: if secure mode is requested and a file cannot be read.
        SchemeMismatchError: if the TLS mode disagrees with SERVER_URL.
    """
    key_path, cert_path = config.key_path, config.cert_path
    if bool(key_path) != bool(cert_path):
        raise ConfigError("missing private key or certificate: pass both or neither")
    secure = bool(key_path and cert_path)

    if secure:
        _check_readable(key_path)
        _check_readable(cert_path)
        logger.info(
            "transport.secure",
            extra={"event": "transport_secure", "key": key_path, "cert": cert_path},
        )

    if secure and not config.url_is_secure:
        raise SchemeMismatchError(
            "you cannot start the server in secure mode while SERVER_URL is plain http"
        )
    if not secure and config.url_is_secure:
        raise SchemeMismatchError(
            "you cannot start the server in insecure mode while SERVER_URL is https"
        )

    return TransportSettings(
        host=config.host,
        port=config.port,
        url=config.url,
        secure=secure,
        key_path=key_path if secure else None,
        cert_path=cert_path if secure else None,
    )


def serve(app: Any, transport: TransportSettings) -> None:
    """Bind and serve `app` until shutdown.

    A bind failure propagates; there is no retry.
    """
    logger.info(
        "server.start",
        extra={
            "event": "server_start",
            "url": f"{transport.url}/",
            "bind": f"{transport.host}:{transport.port}",
            "scheme": "https" if transport.secure else "http",
        },
    )
    # log_config=None keeps uvicorn on the JSON handlers from setup_logging().
    uvicorn.run(app, log_config=None, **transport.uvicorn_kwargs())
