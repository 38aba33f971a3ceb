"""FastAPI app factory: CORS, request logging, health endpoint and token routes."""
from __future__ import annotations

import time
from collections.abc import Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import router as api_router
from .api.routes import TOKEN_HEADER
from .config import load_issuer_config
from .logging_conf import get_logger, setup_logging
from .service.token_service import VivoxTokenService

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")


def create_app(token_service: VivoxTokenService | None = None) -> FastAPI:
    """Build the ASGI app.

    Without an explicit `token_service` the issuer config is read from the
    environment, so `uvicorn token_broker.main:create_app --factory` works.
    """
    if token_service is None:
        token_service = VivoxTokenService(load_issuer_config())

    app = FastAPI(title="Vivox Token Broker", version=__version__)
    app.state.token_service = token_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[TOKEN_HEADER],
    )

    @app.on_event("startup")
    async def _on_startup() -> None:
        logger.info(
            "startup",
            extra={"event": "startup", "issuer": token_service.config.issuer},
        )

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        logger.info("shutdown", extra={"event": "shutdown"})

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """Log a start and end event per request, correlated by X-Request-ID.

        An incoming X-Request-ID is propagated; otherwise one is minted and
        echoed back on the response.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.get("/health", summary="Liveness/readiness check")
    async def health() -> JSONResponse:
        return JSONResponse(content={"ok": True})

    app.include_router(api_router)

    return app
