#!/usr/bin/env python3
"""Command-line entrypoint: `token-broker [KEY_FILE CERT_FILE]`."""
from __future__ import annotations

import argparse
import sys

from .config import load_env_file, load_issuer_config, load_server_config
from .errors import ConfigError
from .logging_conf import get_logger, setup_logging
from .main import create_app
from .service.token_service import VivoxTokenService
from .transport import resolve_transport, serve

logger = get_logger("cli")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the token broker."""
    parser = argparse.ArgumentParser(description="Vivox access-token broker")
    parser.add_argument("key_file", nargs="?", default=None, help="TLS private key (PEM)")
    parser.add_argument("cert_file", nargs="?", default=None, help="TLS certificate (PEM)")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load first")
    return parser.parse_args(argv)


def build(args: argparse.Namespace):
    """Load configuration and return (app, transport) without binding anything."""
    load_env_file(args.env_file)
    server_config = load_server_config(key_path=args.key_file, cert_path=args.cert_file)
    transport = resolve_transport(server_config)
    service = VivoxTokenService(load_issuer_config())
    return create_app(service), transport


def main(argv: list[str] | None = None) -> None:
    setup_logging()
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        app, transport = build(args)
    except ConfigError as e:
        logger.exception("startup.failed", extra={"event": "startup_failed", "error_code": e.code})
        raise SystemExit(1) from e
    serve(app, transport)


if __name__ == "__main__":
    main()
