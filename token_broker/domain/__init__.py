"""Pure domain utilities: channel addressing and token signing.

These modules are free of FastAPI/HTTP concerns so they can be unit-tested and
reused by both the server and the smoke runner.
"""
__all__ = ["channels", "tokens"]
