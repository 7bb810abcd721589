import logging
import sys
import time

from fastapi import FastAPI, Request

from companygrow.core.config import LOG_LEVEL

log = logging.getLogger("http")

SKIP_PATHS = ("/api/health",)


def configure_logging() -> None:
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    if root.hasHandlers():
        root.handlers.clear()
    root.addHandler(handler)

    # ruido de terceros
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def add_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path not in SKIP_PATHS:
            duration_ms = (time.perf_counter() - start) * 1000
            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            log.log(level, "%s %s -> %s (%.1f ms)",
                    request.method, request.url.path, response.status_code, duration_ms)
        return response
