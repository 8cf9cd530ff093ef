from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from debug_server.api.routes.debug import router as debug_router
from debug_server.api.routes.logs import router as logs_router
from debug_server.core.config import Settings, settings as default_settings
from debug_server.core.logging import configure_logging
from debug_server.schemas.debug import HealthResponse
from debug_server.services.collector import CollectorState, LogCollector, get_collector

logger = logging.getLogger("debug_server")

# Instrumented apps often run in a browser on another origin; every response
# (errors included) carries these.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _banner(cfg: Settings) -> List[str]:
    width = 58
    rule = "=" * width
    rows = [
        "Hypothesis Debug Server Running".center(width),
        rule,
        f"  Port:     {cfg.PORT}",
        f"  Log file: {cfg.LOG_PATH}",
        rule,
        "  Endpoints:",
        "    POST /debug  - Receive debug logs",
        "    GET  /health - Health check",
        "    GET  /logs   - Retrieve all logs",
        "    POST /clear  - Clear log file",
        rule,
        "  Press Ctrl+C to stop",
    ]
    return [rule, *rows, rule]


# -------------------------
# Startup / shutdown
# -------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Settings = app.state.settings
    collector: LogCollector = app.state.collector

    configure_logging(cfg.LOG_LEVEL)

    # LogStoreError propagates: the server must not come up without a writable log.
    collector.start()
    for line in _banner(cfg):
        logger.info(line)

    yield

    collector.begin_drain()
    logger.info("Shutting down debug server...")
    total = collector.stop()
    logger.info("Total logs received: %d", total)


# -------------------------
# App factory
# -------------------------
def create_app(
    settings: Optional[Settings] = None,
    collector: Optional[LogCollector] = None,
) -> FastAPI:
    cfg = settings or default_settings

    app = FastAPI(
        title="Hypothesis Debug Server",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = cfg
    app.state.collector = collector or LogCollector(cfg.LOG_PATH)

    # -------------------------
    # Middleware
    # -------------------------
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    # Preflight + CORS + request-id + timing + body-size guard
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        response = None
        if request.method == "OPTIONS":
            response = Response(status_code=204)

        content_length = request.headers.get("content-length")
        if response is None and content_length is not None:
            try:
                if int(content_length) > cfg.MAX_BODY_BYTES:
                    logger.warning(
                        "Rejected %s %s: body of %s bytes exceeds %d MB",
                        request.method,
                        request.url.path,
                        content_length,
                        cfg.MAX_BODY_MB,
                    )
                    response = PlainTextResponse("Payload too large", status_code=413)
            except ValueError:
                pass

        if response is None:
            response = await call_next(request)

        response.headers.update(CORS_HEADERS)
        response.headers["x-request-id"] = request_id
        response.headers["x-response-ms"] = f"{(time.perf_counter() - start) * 1000:.2f}"
        return response

    # -------------------------
    # Routes
    # -------------------------
    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        collector = get_collector(request)
        status = "ok" if collector.state is CollectorState.RUNNING else collector.state.value
        return HealthResponse(status=status, log_count=collector.count, port=cfg.PORT)

    app.include_router(debug_router, prefix="", tags=["debug"])
    app.include_router(logs_router, prefix="", tags=["logs"])

    # -------------------------
    # Error handling
    # -------------------------
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Wrong method on a known path is just another unknown route here.
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

        # This handler runs outside the http middleware, so add CORS here.
        body = "Internal server error"
        if cfg.ENV == "dev":
            body = f"{body}: {exc.__class__.__name__}: {exc}"
        return PlainTextResponse(body, status_code=500, headers=CORS_HEADERS)

    return app


app = create_app()
