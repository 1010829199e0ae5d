import time
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Request/response log line pair; byte-range traffic also logs the window served."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        parts = [f"→ {method} {path}"]
        if request.query_params:
            parts.append(f"Query: {dict(request.query_params)}")
        if "range" in request.headers:
            parts.append(f"Range: {request.headers['range']}")
        parts.append(f"Client: {client_host}")
        logger.info(" | ".join(parts))

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(f"✗ {method} {path} | Error: {e} | Time: {elapsed:.3f}s", exc_info=True)
            raise

        elapsed = time.perf_counter() - started
        status_code = response.status_code
        if status_code >= 500:
            log_level = logging.ERROR
        elif status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        parts = [f"← {method} {path}", f"Status: {status_code}"]
        content_range = response.headers.get("content-range")
        if content_range:
            parts.append(f"Served: {content_range}")
        parts.append(f"Time: {elapsed:.3f}s")
        logger.log(log_level, " | ".join(parts))

        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response
