from __future__ import annotations

__all__ = [
    "BrokerError",
    "ConfigError",
    "TransportError",
    "SchemeMismatchError",
    "TokenGenerationError",
    "UnsupportedRequestTypeError",
]


class BrokerError(Exception):
    """Base class for errors raised by the token broker.

    The `code` attribute lets the API map errors to stable machine codes.
    """

    code: str = "broker_error"


# ------------------------
# Startup
# ------------------------
class ConfigError(BrokerError):
    """Missing or malformed environment configuration. Fatal at startup."""

    code = "config_error"


class TransportError(ConfigError):
    """Secure mode was requested but the key or certificate cannot be read."""

    code = "transport_error"


class SchemeMismatchError(ConfigError):
    """TLS mode disagrees with the scheme of SERVER_URL."""

    code = "scheme_mismatch"


# ------------------------
# Per request
# ------------------------
class TokenGenerationError(BrokerError):
    code = "token_generation_failed"


class UnsupportedRequestTypeError(BrokerError):
    code = "unsupported_request_type"

    def __init__(self, request_type: object) -> None:
        super().__init__(f"Unsupported token request type: {request_type!r}")
        self.request_type = request_type
