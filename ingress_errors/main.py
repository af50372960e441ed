"""FastAPI app factory for the default backend."""
from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import router as api_router
from .config import Settings
from .logging_conf import get_logger, setup_logging

logger = get_logger("app")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the ASGI app around an immutable Settings instance.

    Without explicit settings they are read from the environment, which lets
    uvicorn start it directly: `uvicorn --factory ingress_errors.main:create_app`.
    """
    if settings is None:
        settings = Settings.from_env()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "startup",
            extra={"event": "startup", "templates_dir": str(settings.templates_dir)},
        )
        yield
        logger.info("shutdown", extra={"event": "shutdown"})

    # Docs and schema endpoints would shadow paths that must answer 404.
    app = FastAPI(
        title="ingress-nginx-errors",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.exception_handler(StarletteHTTPException)
    async def _empty_not_found(request: Request, exc: StarletteHTTPException) -> Response:
        # Framework errors (e.g. an unrouted method) never leak a JSON body.
        return Response(status_code=404)

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """Minimal JSON request logging with correlation id.

        - If the client sends X-Request-ID we log it; otherwise we mint one
        - Logs a start and end event with method/path/status/elapsed_ms
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

    app.include_router(api_router)

    return app
