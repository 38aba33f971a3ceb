from __future__ import annotations

import argparse
import os


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the smoke runner."""
    parser = argparse.ArgumentParser(description="Token broker smoke runner")
    parser.add_argument(
        "--base-url", default=os.getenv("BASE_URL", os.getenv("SERVER_URL", "http://127.0.0.1:8000"))
    )
    parser.add_argument("--user-id", default="smoke-user")
    parser.add_argument("--channel-id", default="smoke-channel")
    parser.add_argument(
        "--secret-key",
        default=os.getenv("SERCRET_KEY"),
        help="verify signatures with this key (defaults to SERCRET_KEY)",
    )
    parser.add_argument("--timeout", type=float, default=20.0)
    parser.add_argument("--insecure", action="store_true", help="skip TLS certificate checks")
    return parser.parse_args(argv)
